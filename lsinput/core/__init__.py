"""lsinput 核心模块"""
