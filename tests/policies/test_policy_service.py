from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.employee_portal.employee_portal.backend.storage import storage_path
from src.employee_portal.employee_portal.cache import keys
from src.employee_portal.employee_portal.cache.query_cache import QueryCache
from src.employee_portal.employee_portal.core.enums import MediaType
from src.employee_portal.employee_portal.core.exceptions import BackendError, ValidationError
from src.employee_portal.employee_portal.policies.model import MediaUpload, Policy
from src.employee_portal.employee_portal.policies.service import PolicyService

PUBLIC = "https://abc.supabase.co/storage/v1/object/public/policy-media/"


class FakePolicyRepo:
    def __init__(self, policies=()):
        self._rows = {p.policy_id: p for p in policies}

    def get(self, policy_id):
        return self._rows.get(policy_id)

    def create(self, fields):
        data = dict(fields)
        data["media_type"] = MediaType(data["media_type"])
        policy = Policy(policy_id=f"p{len(self._rows) + 1}", **data)
        self._rows[policy.policy_id] = policy
        return policy

    def update(self, policy_id, updates):
        current = self._rows.get(policy_id)
        if current is None:
            return None
        data = {**vars(current), **updates}
        data["media_type"] = MediaType(data["media_type"])
        self._rows[policy_id] = Policy(**data)
        return self._rows[policy_id]

    def list_policies(self, *, active_only=False):
        return [p for p in self._rows.values() if p.is_active or not active_only]

    def categories(self):
        return ["Safety", "HR", "Safety"]


class FakeStorage:
    def __init__(self, fail_remove=False):
        self.uploaded = []
        self.removed = []
        self._fail_remove = fail_remove

    def upload(self, *, bucket, path, content, content_type=None):
        self.uploaded.append((bucket, path))
        return path

    def public_url(self, *, bucket, path):
        return f"https://abc.supabase.co/storage/v1/object/public/{bucket}/{path}"

    def remove(self, *, bucket, paths):
        if self._fail_remove:
            raise BackendError("remove failed")
        self.removed.append((bucket, list(paths)))


def _clock():
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _service(repo=None, storage=None, cache=None):
    return PolicyService(repo or FakePolicyRepo(), storage or FakeStorage(), cache or QueryCache(), clock=_clock)


def test_storage_path_from_urls():
    assert storage_path(PUBLIC + "image-1.png", "policy-media") == "image-1.png"
    assert (
        storage_path("https://abc.supabase.co/storage/v1/object/sign/task-media/u1/t-1.jpg?token=x", "task-media")
        == "u1/t-1.jpg"
    )
    assert storage_path("u1/t-1.jpg", "task-media") == "u1/t-1.jpg"


def test_create_with_image_uploads_and_links():
    storage = FakeStorage()
    policy = _service(storage=storage).create(
        {"title": "Safety", "content": "Wear shoes"},
        MediaUpload(filename="Shoes.PNG", content=b"img", media_type=MediaType.IMAGE, content_type="image/png"),
    )

    ms = int(_clock().timestamp() * 1000)
    assert storage.uploaded == [("policy-media", f"image-{ms}.png")]
    assert policy.media_type == MediaType.IMAGE
    assert policy.image_url == PUBLIC + f"image-{ms}.png"
    assert policy.video_url is None


def test_replacing_media_removes_old_object():
    existing = Policy(policy_id="p1", title="T", content="C", image_url=PUBLIC + "image-1.png", media_type=MediaType.IMAGE)
    storage = FakeStorage()
    cache = QueryCache()
    cache.set(keys.POLICIES, [existing])

    updated = _service(FakePolicyRepo([existing]), storage, cache).update(
        "p1", {}, MediaUpload(filename="clip.mp4", content=b"vid", media_type=MediaType.VIDEO)
    )

    assert storage.removed == [("policy-media", ["image-1.png"])]
    assert updated.image_url is None
    assert updated.media_type == MediaType.VIDEO
    assert keys.POLICIES not in cache


def test_failed_media_cleanup_does_not_block_update():
    existing = Policy(policy_id="p1", title="T", content="C", image_url=PUBLIC + "image-1.png", media_type=MediaType.IMAGE)
    updated = _service(FakePolicyRepo([existing]), FakeStorage(fail_remove=True)).update("p1", {}, remove_media=True)

    assert updated.media_type == MediaType.NONE
    assert updated.image_url is None


def test_update_requires_changes():
    existing = Policy(policy_id="p1", title="T", content="C")
    with pytest.raises(ValidationError):
        _service(FakePolicyRepo([existing])).update("p1", {})


def test_media_type_none_is_rejected():
    with pytest.raises(ValidationError):
        _service().create(
            {"title": "T", "content": "C"},
            MediaUpload(filename="a.txt", content=b"x", media_type=MediaType.NONE),
        )


def test_categories_are_distinct():
    assert _service().categories() == ["Safety", "HR"]
