"""Entities - parsing schemaless documents into Folder/LinkItem and back.

Tests cover:
    - Defaults for missing fields
    - order absent -> Unordered, omitted from to_document
    - Unknown platform falls back to web, blank folderId means unfiled
"""

from linkvault.core.domain_types import Platform
from linkvault.core.entities import Folder, LinkItem
from linkvault.core.ordering import Ordered, UNORDERED


def test_folder_from_full_document():
    folder = Folder.from_document({
        "id": "f1", "name": "Work", "isPrivate": True, "createdAt": 123,
        "userId": "u1", "order": 2, "color": "blue",
    })
    assert folder.id == "f1"
    assert folder.name == "Work"
    assert folder.is_private is True
    assert folder.created_at == 123
    assert folder.user_id == "u1"
    assert folder.order == Ordered(2)
    assert folder.color == "blue"
    assert folder.description is None


def test_folder_from_partial_document_uses_defaults():
    folder = Folder.from_document({"id": "f1"})
    assert folder.name == ""
    assert folder.is_private is False
    assert folder.created_at == 0
    assert folder.order == UNORDERED


def test_folder_to_document_omits_absent_order():
    folder = Folder(id="f1", name="A", user_id="u1", created_at=5)
    doc = folder.to_document()
    assert "order" not in doc
    assert "id" not in doc
    assert doc == {"name": "A", "isPrivate": False, "createdAt": 5, "userId": "u1"}


def test_folder_to_dict_always_has_order_key():
    assert Folder(id="f1", name="A", user_id="u1").to_dict()["order"] is None
    assert Folder(id="f1", name="A", user_id="u1", order=Ordered(3)).to_dict()["order"] == 3


def test_link_from_document():
    link = LinkItem.from_document({
        "id": "l1", "title": "Docs", "url": "https://x.dev", "platform": "code",
        "folderId": "f1", "isPrivate": False, "isFavorite": True,
        "createdAt": 42, "userId": "u1", "description": "api",
    })
    assert link.platform == Platform.CODE
    assert link.folder_id == "f1"
    assert link.is_favorite is True
    assert link.description == "api"


def test_link_favorite_defaults_to_false():
    link = LinkItem.from_document({"id": "l1", "title": "t", "url": "u", "isFavorite": None})
    assert link.is_favorite is False


def test_link_unknown_platform_falls_back_to_web():
    link = LinkItem.from_document({"id": "l1", "platform": "fax"})
    assert link.platform == Platform.WEB


def test_link_blank_folder_is_unfiled():
    assert LinkItem.from_document({"id": "l1", "folderId": ""}).folder_id is None
    assert LinkItem.from_document({"id": "l1", "folderId": None}).folder_id is None


def test_phone_link():
    link = LinkItem(id="l1", title="Ana", url="+1 555 0100", user_id="u1", platform=Platform.PHONE)
    assert link.is_phone
    assert link.to_document()["platform"] == "phone"


def test_link_to_document_keeps_null_folder():
    doc = LinkItem(id="l1", title="t", url="u", user_id="u1").to_document()
    assert "folderId" in doc
    assert doc["folderId"] is None
