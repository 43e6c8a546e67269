"""
Unit tests for version resolution.
"""

from unittest.mock import Mock

import pytest

from opendex_launcher.core.exceptions import NetworkError, NotFoundError
from opendex_launcher.launcher.resolver import VersionResolver, is_release_ref


class TestIsReleaseRef:
    @pytest.mark.parametrize(
        "branch", ["21.06.03", "21.06.03-rc1", "00.00.00", "99.12.31.hotfix"]
    )
    def test_release_tags(self, branch):
        assert is_release_ref(branch) is True

    @pytest.mark.parametrize(
        "branch",
        [
            "master",
            "feat/21.06.03",
            "1.06.03",
            "21.6.03",
            "v21.06.03",
            "2106.03",
            "",
            "\u0662\u0661.06.03",
            "21.\uff10\uff16.03",
        ],
    )
    def test_branches(self, branch):
        assert is_release_ref(branch) is False


class TestVersionResolver:
    @pytest.mark.parametrize("tag", ["21.06.03", "21.06.03-rc2"])
    def test_tag_is_its_own_version(self, tag):
        client = Mock()
        resolver = VersionResolver(client)

        assert resolver.resolve(tag) == tag
        client.get_head_commit.assert_not_called()

    @pytest.mark.parametrize("branch", ["master", "feature/launcher", "v21.06.03"])
    def test_branch_uses_head_commit(self, branch):
        client = Mock()
        client.get_head_commit.return_value = "abc1234"
        resolver = VersionResolver(client)

        assert resolver.resolve(branch) == "abc1234"
        client.get_head_commit.assert_called_once_with(branch)

    def test_resolves_fresh_every_time(self):
        client = Mock()
        client.get_head_commit.side_effect = ["aaa", "bbb"]
        resolver = VersionResolver(client)

        assert resolver.resolve("master") == "aaa"
        assert resolver.resolve("master") == "bbb"

    @pytest.mark.parametrize("error", [NotFoundError("Not Found"), NetworkError("down")])
    def test_errors_propagate(self, error):
        client = Mock()
        client.get_head_commit.side_effect = error

        with pytest.raises(type(error)):
            VersionResolver(client).resolve("master")

    def test_verbose_logs_branch(self, caplog):
        client = Mock()
        client.get_head_commit.return_value = "abc1234"

        with caplog.at_level("INFO"):
            VersionResolver(client, verbose=True).resolve("master")

        assert "Branch: master (abc1234)" in caplog.text
