"""Tests for path authorization."""

import os

import pytest

from guarded_fs.core.authorizer import (
    PathAuthorizer,
    expand_home,
    is_within_directories,
    normalize_path,
)
from guarded_fs.exceptions import ErrorKind, FileSystemError
from guarded_fs.types import SecurityPolicy


class TestIsWithinDirectories:
    """Tests for the allow-list containment rule."""

    def test_exact_match(self):
        assert is_within_directories("/srv/data", ["/srv/data"]) is True

    def test_descendant(self):
        assert is_within_directories("/srv/data/a/b.txt", ["/srv/data"]) is True

    def test_sibling_with_common_prefix(self):
        """/srv/data-evil must not match /srv/data."""
        assert is_within_directories("/srv/data-evil/x", ["/srv/data"]) is False

    def test_empty_list_never_matches(self):
        assert is_within_directories("/srv/data", []) is False

    def test_empty_path(self):
        assert is_within_directories("", ["/srv/data"]) is False


class TestNormalization:
    """Tests for tilde expansion and normalization."""

    def test_expand_home_alone(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_home("~") == str(tmp_path)

    def test_expand_home_with_separator(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_home("~/notes.txt") == str(tmp_path) + "/notes.txt"

    def test_other_tilde_forms_untouched(self):
        assert expand_home("~other/notes.txt") == "~other/notes.txt"

    def test_normalize_collapses_dots(self):
        assert normalize_path("/srv/data/./a/../b.txt") == os.path.normpath("/srv/data/b.txt")

    def test_normalize_empty(self):
        assert normalize_path("") == ""


class TestPathAuthorizer:
    """Tests for PathAuthorizer."""

    @pytest.mark.asyncio
    async def test_allows_path_within_root(self, authorizer, allowed_dir):
        """Test that paths within the root are allowed."""
        test_file = allowed_dir / "test.txt"
        test_file.touch()

        assert await authorizer.authorize(str(test_file)) == str(test_file)

    @pytest.mark.asyncio
    async def test_allows_root_itself(self, authorizer, allowed_dir):
        assert await authorizer.authorize(str(allowed_dir)) == str(allowed_dir)

    @pytest.mark.asyncio
    async def test_blocks_path_outside_root(self, authorizer):
        """Test that paths outside the root are blocked."""
        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize("/etc/passwd")
        assert exc_info.value.kind is ErrorKind.PATH_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_blocks_traversal_attempt(self, authorizer, allowed_dir):
        """Test that path traversal attempts are blocked."""
        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(allowed_dir / ".." / ".." / "etc" / "passwd"))
        assert exc_info.value.kind is ErrorKind.PATH_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_blocks_prefix_sibling(self, authorizer, tmp_path):
        """A sibling directory sharing the root's name prefix is not allowed."""
        evil = tmp_path / "allowed-evil"
        evil.mkdir()

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(evil / "x.txt"))
        assert exc_info.value.kind is ErrorKind.PATH_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_empty_path_is_validation_error(self, authorizer):
        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize("")
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_null_byte_is_validation_error(self, authorizer, allowed_dir):
        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(allowed_dir) + "/bad\0name.txt")
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_empty_allow_list_rejects_everything(self, allowed_dir):
        authorizer = PathAuthorizer(SecurityPolicy())
        (allowed_dir / "a.txt").touch()

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(allowed_dir / "a.txt"))
        assert exc_info.value.kind is ErrorKind.PATH_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_tilde_expands_to_home(self, monkeypatch, authorizer, allowed_dir):
        monkeypatch.setenv("HOME", str(allowed_dir))

        assert await authorizer.authorize("~/notes.txt") == str(allowed_dir / "notes.txt")

    @pytest.mark.asyncio
    async def test_missing_nested_path_is_allowed(self, authorizer, allowed_dir):
        target = allowed_dir / "a" / "b" / "c.txt"
        assert await authorizer.authorize(str(target)) == str(target)

    @pytest.mark.asyncio
    async def test_allowed_root_given_through_link(self, tmp_path, allowed_dir):
        """A root configured via a symlink still matches the real paths under it."""
        alias = tmp_path / "alias"
        alias.symlink_to(allowed_dir, target_is_directory=True)
        authorizer = PathAuthorizer(SecurityPolicy(allowed_directories=(str(alias),)))
        (allowed_dir / "f.txt").touch()

        assert await authorizer.authorize(str(allowed_dir / "f.txt")) == str(allowed_dir / "f.txt")

    @pytest.mark.asyncio
    async def test_traversal_protection_disabled(self, allowed_dir, outside_dir):
        policy = SecurityPolicy(
            allowed_directories=(str(allowed_dir),),
            enable_path_traversal_protection=False,
        )
        authorizer = PathAuthorizer(policy)

        assert await authorizer.authorize(str(outside_dir / "x.txt")) == str(outside_dir / "x.txt")

    @pytest.mark.asyncio
    async def test_is_authorized_returns_bool(self, authorizer, allowed_dir):
        """Test that is_authorized returns boolean without raising."""
        assert await authorizer.is_authorized(str(allowed_dir / "test.txt")) is True
        assert await authorizer.is_authorized("/etc/passwd") is False

    @pytest.mark.asyncio
    async def test_authorize_all_stops_at_first_rejection(self, authorizer, allowed_dir):
        paths = [str(allowed_dir / "a.txt"), "/etc/passwd", str(allowed_dir / "b.txt")]

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize_all(paths)
        assert exc_info.value.kind is ErrorKind.PATH_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_authorize_all_returns_in_order(self, authorizer, allowed_dir):
        paths = [str(allowed_dir / "b.txt"), str(allowed_dir / "a.txt")]
        assert await authorizer.authorize_all(paths) == paths


class TestSymlinkValidation:
    """Tests for symbolic link handling in the authorizer."""

    @pytest.mark.asyncio
    async def test_link_escaping_allow_list(self, authorizer, allowed_dir, outside_dir):
        secret = outside_dir / "secret.txt"
        secret.write_text("secret")
        link = allowed_dir / "escape.txt"
        link.symlink_to(secret)

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(link))
        assert exc_info.value.kind is ErrorKind.SYMLINK_TARGET_INVALID

    @pytest.mark.asyncio
    async def test_link_escaping_rejected_without_following(self, authorizer, allowed_dir, outside_dir):
        secret = outside_dir / "secret.txt"
        secret.write_text("secret")
        link = allowed_dir / "escape.txt"
        link.symlink_to(secret)

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(link), follow_symlinks=False)
        assert exc_info.value.kind is ErrorKind.SYMLINK_TARGET_INVALID

    @pytest.mark.asyncio
    async def test_link_inside_allow_list(self, authorizer, allowed_dir):
        real = allowed_dir / "real.txt"
        real.write_text("data")
        link = allowed_dir / "link.txt"
        link.symlink_to(real)

        assert await authorizer.authorize(str(link)) == str(real)
        assert await authorizer.authorize(str(link), follow_symlinks=False) == str(link)

    @pytest.mark.asyncio
    async def test_dangling_link_cannot_be_followed(self, authorizer, allowed_dir):
        link = allowed_dir / "dangling"
        link.symlink_to(allowed_dir / "missing.txt")

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(link))
        assert exc_info.value.kind is ErrorKind.SYMLINK_TARGET_INVALID

        assert await authorizer.authorize(str(link), follow_symlinks=False) == str(link)

    @pytest.mark.asyncio
    async def test_file_under_linked_directory(self, authorizer, allowed_dir, outside_dir):
        (outside_dir / "f.txt").write_text("data")
        (allowed_dir / "linked").symlink_to(outside_dir, target_is_directory=True)

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(allowed_dir / "linked" / "f.txt"))
        assert exc_info.value.kind is ErrorKind.SYMLINK_TARGET_INVALID

    @pytest.mark.asyncio
    async def test_new_file_under_linked_directory(self, authorizer, allowed_dir, outside_dir):
        (allowed_dir / "linked").symlink_to(outside_dir, target_is_directory=True)

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(allowed_dir / "linked" / "new.txt"))
        assert exc_info.value.kind is ErrorKind.PATH_NOT_ALLOWED

    @pytest.mark.asyncio
    async def test_symlink_validation_disabled(self, allowed_dir, outside_dir):
        policy = SecurityPolicy(
            allowed_directories=(str(allowed_dir),),
            enable_symlink_validation=False,
        )
        authorizer = PathAuthorizer(policy)
        link = allowed_dir / "escape.txt"
        link.symlink_to(outside_dir / "secret.txt")

        assert await authorizer.authorize(str(link)) == str(link)


class TestPolicyLimits:
    """Tests for extension and size restrictions."""

    @pytest.mark.asyncio
    async def test_restricted_extension(self, allowed_dir):
        policy = SecurityPolicy(
            allowed_directories=(str(allowed_dir),),
            restricted_extensions=(".exe",),
        )
        authorizer = PathAuthorizer(policy)

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(allowed_dir / "tool.EXE"))
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR
        assert await authorizer.is_authorized(str(allowed_dir / "tool.txt")) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["setup.exe", "run.BAT", "build.cmd", "command.com", "saver.scr"])
    async def test_executables_blocked_by_default(self, allowed_dir, name):
        authorizer = PathAuthorizer(SecurityPolicy(allowed_directories=(str(allowed_dir),)))

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(allowed_dir / name))
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_empty_blacklist_allows_executables(self, allowed_dir):
        policy = SecurityPolicy(allowed_directories=(str(allowed_dir),), restricted_extensions=())
        authorizer = PathAuthorizer(policy)

        assert await authorizer.is_authorized(str(allowed_dir / "setup.exe")) is True

    @pytest.mark.asyncio
    async def test_max_file_size(self, allowed_dir):
        policy = SecurityPolicy(allowed_directories=(str(allowed_dir),), max_file_size=10)
        authorizer = PathAuthorizer(policy)
        big = allowed_dir / "big.txt"
        big.write_bytes(b"x" * 20)
        small = allowed_dir / "small.txt"
        small.write_bytes(b"x" * 10)

        with pytest.raises(FileSystemError) as exc_info:
            await authorizer.authorize(str(big))
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR
        assert exc_info.value.details["size"] == 20
        assert await authorizer.authorize(str(small)) == str(small)

    @pytest.mark.asyncio
    async def test_size_limit_disabled(self, allowed_dir):
        policy = SecurityPolicy(allowed_directories=(str(allowed_dir),), max_file_size=None)
        big = allowed_dir / "big.txt"
        big.write_bytes(b"x" * 2048)

        assert await PathAuthorizer(policy).authorize(str(big)) == str(big)
