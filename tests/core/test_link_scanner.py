"""链接扫描器测试"""

import os

import pytest

from lsinput.core.data_structures import LinkEntry
from lsinput.core.exceptions import (
    DirectoryUnavailableError,
    LinkScanException,
    ScopeError,
    TargetResolutionError,
)
from lsinput.core.link_scanner import LinkScanner
from lsinput.core.path_resolver import PathResolver


@pytest.fixture(params=['anchored', 'chdir'])
def scanner(request):
    """两种解析策略下的扫描器"""
    return LinkScanner(PathResolver(request.param))


class TestFindLinksTo:
    """find_links_to 测试"""

    def test_basic_scenario(self, scanner, link_dir):
        """测试 link1 -> ./A 匹配，link2 -> 无关文件不匹配"""
        result = scanner.find_links_to(link_dir / "A", link_dir)
        assert result == [os.path.join(str(link_dir), "link1")]

    def test_dangling_link_skipped(self, scanner, link_dir):
        """测试悬空链接被跳过"""
        os.symlink("nonexistent", link_dir / "link3")

        result = scanner.find_links_to(link_dir / "A", link_dir)

        assert result == [os.path.join(str(link_dir), "link1")]

    def test_parent_of_file_link_skipped(self, scanner, link_dir):
        """测试 A/.. 形式的链接在 A 是文件时不匹配所在目录"""
        os.symlink("A/..", link_dir / "bogus")

        assert scanner.find_links_to(link_dir, link_dir) == []
        skipped = scanner.scan(link_dir, link_dir).skipped
        assert [s.path for s in skipped] == [os.path.join(str(link_dir), "bogus")]

    def test_no_false_positives(self, scanner, link_dir, temp_dir):
        """测试无关目标不会匹配"""
        result = scanner.find_links_to(temp_dir / "other" / "B", link_dir)
        assert result == [os.path.join(str(link_dir), "link2")]

    def test_no_false_negatives(self, scanner, temp_dir):
        """测试各种指向目标的链接都被找到且只出现一次"""
        dev = temp_dir / "dev"
        dev.mkdir()
        (dev / "event3").write_text("")
        aliases = dev / "by-path"
        aliases.mkdir()
        os.symlink("../event3", aliases / "relative")
        os.symlink(str(dev / "event3"), aliases / "absolute")
        os.symlink("./relative", aliases / "chained")
        os.symlink("../by-path/../event3", aliases / "roundabout")
        os.symlink("../missing", aliases / "broken")
        (aliases / "plain-file").write_text("")

        result = scanner.find_links_to(dev / "event3", aliases)

        expected = {str(aliases / n) for n in ("relative", "absolute", "chained", "roundabout")}
        assert set(result) == expected
        assert len(result) == len(expected)

    def test_target_is_symlink(self, scanner, link_dir):
        """测试目标本身是链接时按最终文件比较"""
        result = scanner.find_links_to(link_dir / "link1", link_dir)
        assert result == [os.path.join(str(link_dir), "link1")]

    def test_relative_target_and_directory(self, scanner, link_dir, monkeypatch):
        """测试目标和目录都是相对路径"""
        monkeypatch.chdir(link_dir.parent)

        result = scanner.find_links_to("D/A", "D")

        assert result == [os.path.join("D", "link1")]

    def test_links_resolved_from_their_directory(self, scanner, link_dir, temp_dir, monkeypatch):
        """测试链接不以进程工作目录为基准"""
        decoy = temp_dir / "decoy"
        decoy.mkdir()
        (decoy / "A").write_text("decoy")
        monkeypatch.chdir(decoy)

        assert scanner.find_links_to(decoy / "A", link_dir) == []

    def test_directory_links_are_followed(self, scanner, temp_dir):
        """测试指向目录的链接"""
        (temp_dir / "target").mkdir()
        aliases = temp_dir / "aliases"
        aliases.mkdir()
        os.symlink("../target", aliases / "to-dir")

        assert scanner.find_links_to(temp_dir / "target", aliases) == [str(aliases / "to-dir")]

    def test_empty_directory(self, scanner, link_dir, temp_dir):
        """测试空目录"""
        empty = temp_dir / "empty"
        empty.mkdir()
        assert scanner.find_links_to(link_dir / "A", empty) == []

    def test_missing_directory(self, scanner, link_dir, temp_dir):
        """测试目录不存在"""
        with pytest.raises(DirectoryUnavailableError) as exc_info:
            scanner.find_links_to(link_dir / "A", temp_dir / "missing")
        assert exc_info.value.details["directory"] == str(temp_dir / "missing")

    def test_directory_is_a_file(self, scanner, link_dir):
        """测试目录参数是普通文件"""
        with pytest.raises(DirectoryUnavailableError):
            scanner.find_links_to(link_dir / "A", link_dir / "A")

    def test_missing_target(self, scanner, link_dir):
        """测试目标不存在"""
        with pytest.raises(TargetResolutionError):
            scanner.find_links_to(link_dir / "missing", link_dir)

    def test_scan_errors_share_base_class(self, scanner, link_dir, temp_dir):
        """测试扫描异常有共同基类"""
        with pytest.raises(LinkScanException):
            scanner.find_links_to(link_dir / "A", temp_dir / "missing")


class TestScan:
    """scan 测试"""

    def test_result_details(self, link_dir):
        """测试结果包含目标、目录和被跳过的链接"""
        os.symlink("nonexistent", link_dir / "link3")
        scanner = LinkScanner()

        result = scanner.scan(link_dir / "link1", link_dir)

        assert result.target == str(link_dir / "A")
        assert result.directory == str(link_dir)
        assert os.path.join(str(link_dir), "link1") in result
        assert len(result) == 1
        assert [s.path for s in result.skipped] == [os.path.join(str(link_dir), "link3")]
        assert "nonexistent" in result.skipped[0].reason

    def test_to_dict(self, link_dir):
        """测试转换为字典"""
        result = LinkScanner().scan(link_dir / "A", link_dir)
        data = result.to_dict()

        assert data["links"] == [os.path.join(str(link_dir), "link1")]
        assert data["skipped"] == []

    def test_scope_error_propagates(self, link_dir):
        """测试基准目录失效不被当作单个链接失败"""

        class BrokenResolver(PathResolver):
            def resolve_relative_to(self, base_dir, relative_path):
                raise ScopeError("Unable to enter directory")

        scanner = LinkScanner(BrokenResolver())
        with pytest.raises(ScopeError):
            scanner.scan(link_dir / "A", link_dir)


class TestIterLinkEntries:
    """iter_link_entries 测试"""

    def test_only_symlinks(self, link_dir):
        """测试只返回符号链接及其原始内容"""
        (link_dir / "subdir").mkdir()

        entries = sorted(LinkScanner().iter_link_entries(link_dir), key=lambda e: e.name)

        assert [e.name for e in entries] == ["link1", "link2"]
        assert entries[0] == LinkEntry(
            name="link1",
            path=os.path.join(str(link_dir), "link1"),
            destination="./A",
        )

    def test_dangling_link_listed(self, link_dir):
        """测试悬空链接也会列出"""
        os.symlink("nonexistent", link_dir / "link3")
        names = {e.name for e in LinkScanner().iter_link_entries(link_dir)}
        assert "link3" in names

    def test_missing_directory(self, temp_dir):
        """测试目录不存在"""
        with pytest.raises(DirectoryUnavailableError):
            list(LinkScanner().iter_link_entries(temp_dir / "missing"))
