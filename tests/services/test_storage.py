"""Tests for local blob storage."""

import io

import pytest

from fixmyhood.services.storage import BlobStoreError, LocalBlobStore


@pytest.fixture()
def store(tmp_path):
    return LocalBlobStore(tmp_path, "/static/uploads/")


def test_save_and_remove(store, tmp_path) -> None:
    url = store.save(io.BytesIO(b"\x89PNG"), owner_id="u1", filename="Pothole.PNG")

    assert url.startswith("/static/uploads/u1/")
    assert url.endswith(".png")
    path = store.path_for(url)
    assert path is not None and path.read_bytes() == b"\x89PNG"

    assert store.remove(url)
    assert not path.exists()
    assert not store.remove(url)


def test_rejects_non_image_files(store) -> None:
    with pytest.raises(BlobStoreError):
        store.save(io.BytesIO(b"#!/bin/sh"), owner_id="u1", filename="run.sh")


@pytest.mark.parametrize(
    "url",
    [None, "", "https://cdn.example.com/u1/a.png", "/static/uploads/../secrets.txt"],
)
def test_remove_ignores_foreign_urls(store, url) -> None:
    assert not store.remove(url)
