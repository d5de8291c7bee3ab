"""lsinput 命令行模块"""
