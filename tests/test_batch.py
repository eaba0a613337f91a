"""Tests for batch operations."""

import pytest

from guarded_fs.core.batch import describe_item_error
from guarded_fs.exceptions import ErrorKind, FileSystemError
from guarded_fs.types import BatchOperationResult


class TestBatchOperationResult:
    """Tests for the result aggregate."""

    def test_empty(self):
        result = BatchOperationResult()
        assert result.total_count == 0
        assert result.to_dict() == {
            "results": [],
            "errors": [],
            "totalCount": 0,
            "successCount": 0,
            "errorCount": 0,
        }

    def test_counts(self):
        result = BatchOperationResult()
        result.add_success("a")
        result.add_error("b")
        result.add_error("c")

        assert result.success_count == 1
        assert result.error_count == 2
        assert result.total_count == 3


class TestRun:
    """Tests for per-item isolation in BatchExecutor.run."""

    @pytest.mark.asyncio
    async def test_empty_items(self, batch):
        async def never_called(item):
            raise AssertionError("should not run")

        result = await batch.run([], never_called)
        assert result.total_count == 0

    @pytest.mark.asyncio
    async def test_one_entry_per_item(self, batch):
        async def operation(item):
            if item == "bad":
                raise FileSystemError(ErrorKind.FILE_NOT_FOUND, "File not found: bad")
            if item == "boom":
                raise RuntimeError("unexpected")
            return f"ok: {item}"

        result = await batch.run(["a", "bad", "b", "boom"], operation)

        assert result.results == ["ok: a", "ok: b"]
        assert result.errors == ["File not found: bad", "boom: unexpected"]
        assert result.total_count == 4

    def test_describe_item_error(self):
        error = FileSystemError(ErrorKind.PATH_NOT_ALLOWED, "denied")
        assert describe_item_error("x", error) == "denied"
        assert describe_item_error("x", ValueError("bad")) == "x: bad"


class TestBatchMove:
    """Tests for BatchExecutor.batch_move."""

    @pytest.mark.asyncio
    async def test_partial_failure(self, batch, allowed_dir):
        (allowed_dir / "a.txt").write_text("a")
        (allowed_dir / "c.txt").write_text("c")
        target = allowed_dir / "dest"

        result = await batch.batch_move(
            [str(allowed_dir / "a.txt"), str(allowed_dir / "missing.txt"), str(allowed_dir / "c.txt")],
            str(target),
        )

        assert result.success_count == 2
        assert result.error_count == 1
        assert "missing.txt" in result.errors[0]
        assert result.results[0] == f"{allowed_dir / 'a.txt'} -> {target / 'a.txt'}"
        assert (target / "a.txt").exists()
        assert (target / "c.txt").exists()

    @pytest.mark.asyncio
    async def test_outside_source_is_item_error(self, batch, allowed_dir, outside_dir):
        (outside_dir / "x.txt").write_text("x")
        (allowed_dir / "a.txt").write_text("a")

        result = await batch.batch_move(
            [str(outside_dir / "x.txt"), str(allowed_dir / "a.txt")],
            str(allowed_dir / "dest"),
        )

        assert result.success_count == 1
        assert result.error_count == 1
        assert (outside_dir / "x.txt").exists()

    @pytest.mark.asyncio
    async def test_destination_is_a_file(self, batch, allowed_dir):
        (allowed_dir / "a.txt").write_text("a")
        (allowed_dir / "dest").write_text("not a dir")

        with pytest.raises(FileSystemError) as exc_info:
            await batch.batch_move([str(allowed_dir / "a.txt")], str(allowed_dir / "dest"))
        assert exc_info.value.kind is ErrorKind.INVALID_OPERATION

    @pytest.mark.asyncio
    async def test_missing_destination_without_create_dirs(self, batch, allowed_dir):
        (allowed_dir / "a.txt").write_text("a")

        with pytest.raises(FileSystemError) as exc_info:
            await batch.batch_move(
                [str(allowed_dir / "a.txt")], str(allowed_dir / "dest"), create_dirs=False
            )
        assert exc_info.value.kind is ErrorKind.FILE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_destination_outside(self, batch, allowed_dir, outside_dir):
        with pytest.raises(FileSystemError) as exc_info:
            await batch.batch_move([str(allowed_dir / "a.txt")], str(outside_dir))
        assert exc_info.value.kind is ErrorKind.PATH_NOT_ALLOWED


class TestBatchCopy:
    """Tests for BatchExecutor.batch_copy."""

    @pytest.mark.asyncio
    async def test_copy_with_existing_destination(self, batch, allowed_dir):
        (allowed_dir / "a.txt").write_text("new")
        (allowed_dir / "b.txt").write_text("b")
        target = allowed_dir / "dest"
        target.mkdir()
        (target / "a.txt").write_text("old")

        result = await batch.batch_copy(
            [str(allowed_dir / "a.txt"), str(allowed_dir / "b.txt")], str(target)
        )

        assert result.success_count == 1
        assert result.error_count == 1
        assert "already exists" in result.errors[0]
        assert (target / "a.txt").read_text() == "old"
        assert (allowed_dir / "a.txt").exists()

        result = await batch.batch_copy([str(allowed_dir / "a.txt")], str(target), overwrite=True)
        assert result.success_count == 1
        assert (target / "a.txt").read_text() == "new"


class TestBatchDelete:
    """Tests for BatchExecutor.batch_delete."""

    @pytest.mark.asyncio
    async def test_files_and_empty_directories(self, batch, allowed_dir):
        (allowed_dir / "a.txt").write_text("a")
        (allowed_dir / "empty").mkdir()

        result = await batch.batch_delete([str(allowed_dir / "a.txt"), str(allowed_dir / "empty")])

        assert result.results == [
            f"deleted file: {allowed_dir / 'a.txt'}",
            f"deleted directory: {allowed_dir / 'empty'}",
        ]
        assert not (allowed_dir / "empty").exists()

    @pytest.mark.asyncio
    async def test_non_empty_directory_is_item_error(self, batch, allowed_dir):
        (allowed_dir / "full").mkdir()
        (allowed_dir / "full" / "f.txt").write_text("x")
        (allowed_dir / "a.txt").write_text("a")

        result = await batch.batch_delete([str(allowed_dir / "full"), str(allowed_dir / "a.txt")])

        assert result.success_count == 1
        assert result.error_count == 1
        assert str(allowed_dir / "full") in result.errors[0]
        assert (allowed_dir / "full" / "f.txt").exists()

    @pytest.mark.asyncio
    async def test_missing_item(self, batch, allowed_dir):
        result = await batch.batch_delete([str(allowed_dir / "nope.txt")])

        assert result.errors == [f"File not found: {allowed_dir / 'nope.txt'}"]

    @pytest.mark.asyncio
    async def test_sensitive_item_blocks_whole_batch(self, batch, allowed_dir):
        (allowed_dir / "a.txt").write_text("a")
        (allowed_dir / "id.pem").write_text("key")

        with pytest.raises(FileSystemError) as exc_info:
            await batch.batch_delete([str(allowed_dir / "a.txt"), str(allowed_dir / "id.pem")])

        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
        assert "1 sensitive file(s)" in exc_info.value.message
        # nothing was deleted, not even the harmless file
        assert (allowed_dir / "a.txt").exists()
        assert (allowed_dir / "id.pem").exists()

    @pytest.mark.asyncio
    async def test_read_only_item_is_item_error(self, batch, allowed_dir):
        frozen = allowed_dir / "frozen.txt"
        frozen.write_text("x")
        frozen.chmod(0o444)

        result = await batch.batch_delete([str(frozen)])

        assert result.errors == [f"Read-only file delete blocked: {frozen}"]
        assert frozen.exists()

    @pytest.mark.asyncio
    async def test_force_without_confirmation(self, batch, allowed_dir):
        (allowed_dir / "id.pem").write_text("key")

        with pytest.raises(FileSystemError) as exc_info:
            await batch.batch_delete([str(allowed_dir / "id.pem")], force=True)

        assert exc_info.value.details["reason"] == "not_confirmed"
        assert (allowed_dir / "id.pem").exists()

    @pytest.mark.asyncio
    async def test_force_with_confirmation(self, confirming_batch, allowed_dir):
        (allowed_dir / "id.pem").write_text("key")
        frozen = allowed_dir / "frozen.txt"
        frozen.write_text("x")
        frozen.chmod(0o444)

        result = await confirming_batch.batch_delete([str(allowed_dir / "id.pem"), str(frozen)], force=True)

        assert result.success_count == 2
        assert all(r.endswith("(force)") for r in result.results)
        assert not (allowed_dir / "id.pem").exists()
        assert not frozen.exists()

    @pytest.mark.asyncio
    async def test_empty_batch(self, batch):
        result = await batch.batch_delete([])
        assert result.total_count == 0
