"""LocalStorageService: atomic writes, traversal protection, cleanup."""

import pytest

from signflow.infrastructure.exceptions import StorageNotFoundError, StoragePermissionError
from signflow.infrastructure.external.storage import LocalStorageService


@pytest.fixture
def storage(tmp_path) -> LocalStorageService:
    return LocalStorageService(str(tmp_path / "store"))


async def test_write_read_overwrite(storage) -> None:
    ref = "documents/d1/v1/po.pdf"
    await storage.write(ref, b"%PDF-1")
    assert await storage.read(ref) == b"%PDF-1"

    await storage.write(ref, b"%PDF-2")
    assert await storage.read(ref) == b"%PDF-2"
    leftovers = [p.name for p in (storage.storage_root / "documents/d1/v1").iterdir()]
    assert leftovers == ["po.pdf"]


async def test_exists_and_missing_read(storage) -> None:
    assert not await storage.exists("documents/none.pdf")
    with pytest.raises(StorageNotFoundError):
        await storage.read("documents/none.pdf")


async def test_delete_prunes_empty_directories(storage) -> None:
    await storage.write("documents/d1/v1/po.pdf", b"x")
    await storage.write("documents/d2/v1/po.pdf", b"y")

    assert await storage.delete("documents/d1/v1/po.pdf") is True
    assert await storage.delete("documents/d1/v1/po.pdf") is False
    assert not (storage.storage_root / "documents/d1").exists()
    assert (storage.storage_root / "documents/d2/v1/po.pdf").exists()
    assert storage.storage_root.exists()


@pytest.mark.parametrize("ref", ["../escape.pdf", "documents/../../escape.pdf"])
async def test_path_traversal_denied(storage, ref) -> None:
    with pytest.raises(StoragePermissionError):
        await storage.write(ref, b"x")
    assert await storage.exists(ref) is False
