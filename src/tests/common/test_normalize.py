"""Tests for normalizing CMS records of both response shapes."""

import unittest

from common.cms.normalize import (
    display_name,
    flatten,
    normalize_comment,
    normalize_post,
    normalize_user,
    normalize_vote,
    post_route_param,
    response_items,
    unwrap_relation,
)
from common.cms.types import BlogPost, User


V4_POST = {
    "id": 3,
    "attributes": {
        "title": "Wrapped",
        "slug": "wrapped",
        "description": "A v4 post",
        "content": [{"type": "paragraph", "children": [{"type": "text", "text": "Hi"}]}],
        "createdAt": "2024-01-01T00:00:00.000Z",
        "cover": {"data": {"id": 9, "attributes": {"url": "/uploads/cover.png"}}},
        "categories": {"data": [{"id": 1, "attributes": {"name": "Tech", "documentId": "cat1"}}]},
        "author": {"data": {"id": 2, "attributes": {"name": "Ann", "email": "ann@example.com"}}},
    },
}

V5_POST = {
    "id": 4,
    "documentId": "doc4",
    "title": "Flat",
    "slug": None,
    "content": "plain text",
    "publishedAt": "2024-02-02T00:00:00.000Z",
    "cover": {"url": "/uploads/flat.png"},
    "categories": [{"id": 5, "documentId": "cat5", "name": "Life"}],
}


class TestUnwrapping(unittest.TestCase):

    def test_flatten_v4_record(self):
        self.assertEqual(flatten({"id": 1, "attributes": {"a": 2}}), {"id": 1, "a": 2})

    def test_flatten_passes_flat_record(self):
        self.assertEqual(flatten({"id": 1, "a": 2}), {"id": 1, "a": 2})

    def test_unwrap_relation_list(self):
        value = {"data": [{"id": 1, "attributes": {"name": "x"}}]}
        self.assertEqual(unwrap_relation(value), [{"id": 1, "name": "x"}])

    def test_unwrap_keeps_records_with_data_field(self):
        value = {"data": "payload", "id": 1}
        self.assertEqual(unwrap_relation(value), value)

    def test_response_items(self):
        self.assertEqual(response_items([1, 2]), [1, 2])
        self.assertEqual(response_items({"data": [3]}), [3])
        self.assertEqual(response_items({"data": {"id": 1}}), [])
        self.assertEqual(response_items(None), [])


class TestNormalizePost(unittest.TestCase):

    def test_v4_post(self):
        post = normalize_post(V4_POST)

        self.assertEqual(post.id, 3)
        self.assertEqual(post.title, "Wrapped")
        self.assertEqual(post.slug, "wrapped")
        self.assertEqual(post.cover.url, "/uploads/cover.png")
        self.assertEqual([c.name for c in post.categories], ["Tech"])
        self.assertEqual(post.categories[0].document_id, "cat1")
        self.assertEqual(post.author.name, "Ann")
        self.assertEqual(post.created_at, "2024-01-01T00:00:00.000Z")

    def test_v5_post(self):
        post = normalize_post(V5_POST)

        self.assertEqual(post.document_id, "doc4")
        self.assertIsNone(post.slug)
        self.assertEqual(post.content, "plain text")
        self.assertEqual(post.cover.url, "/uploads/flat.png")
        self.assertEqual(post.categories[0].name, "Life")
        self.assertEqual(post.created_at, "2024-02-02T00:00:00.000Z")
        self.assertIsNone(post.author)

    def test_empty_slug_is_none(self):
        self.assertIsNone(normalize_post({"id": 1, "title": "t", "slug": ""}).slug)

    def test_post_route_param_prefers_slug(self):
        self.assertEqual(post_route_param(BlogPost(id=1, title="t", slug="s", document_id="d")), "s")
        self.assertEqual(post_route_param(BlogPost(id=1, title="t", document_id="d")), "d")
        self.assertEqual(post_route_param(BlogPost(id=1, title="t")), 1)


class TestNormalizeUser(unittest.TestCase):

    def test_default_role(self):
        user = normalize_user({"id": 1, "username": "bob", "email": "b@example.com"})
        self.assertEqual(user.role, {"type": "authenticated", "name": "Authenticated"})

    def test_keeps_role(self):
        user = normalize_user({"id": 1, "username": "ed", "role": {"id": 3, "name": "Editor", "type": "editor"}})
        self.assertEqual(user.role, {"name": "Editor", "type": "editor"})

    def test_display_name(self):
        self.assertEqual(display_name(User(id=1, username="bob")), "bob")
        self.assertEqual(display_name(User(id=1, username="", email="e@x")), "e@x")
        self.assertEqual(display_name(None), "Anonymous")


class TestNormalizeComment(unittest.TestCase):

    def test_flat_comment_with_user(self):
        comment = normalize_comment({
            "id": 1,
            "content": "Nice",
            "createdAt": "2024-01-01T00:00:00Z",
            "user": {"id": 7, "username": "carol"},
        })

        self.assertEqual(comment.content, "Nice")
        self.assertEqual(comment.user.id, 7)
        self.assertEqual(comment.user.username, "carol")
        self.assertEqual(comment.user.role, {"name": "User", "type": "authenticated"})
        self.assertTrue(comment.is_approved)

    def test_wrapped_author_takes_precedence(self):
        comment = normalize_comment({
            "id": 2,
            "attributes": {
                "content": "Hello",
                "isApproved": False,
                "author": {"data": {"id": 8, "attributes": {"name": "Dave"}}},
                "user": {"id": 9, "username": "ignored"},
            },
        })

        self.assertEqual(comment.user.id, 8)
        self.assertEqual(comment.user.username, "Dave")
        self.assertFalse(comment.is_approved)

    def test_wrapped_user(self):
        comment = normalize_comment({
            "id": 3,
            "content": "x",
            "user": {"data": {"id": 4, "attributes": {"username": "erin"}}},
        })
        self.assertEqual(comment.user.id, 4)
        self.assertEqual(comment.user.username, "erin")

    def test_without_user(self):
        comment = normalize_comment({"id": 5, "content": "anon"})
        self.assertEqual(comment.user.id, 0)
        self.assertEqual(comment.user.username, "User")


class TestNormalizeVote(unittest.TestCase):

    def test_vote_with_user(self):
        vote = normalize_vote({"id": 1, "value": -1, "user": {"id": 3}})
        self.assertEqual((vote.id, vote.value, vote.user_id), (1, -1, 3))

    def test_v4_vote(self):
        vote = normalize_vote({"id": 2, "attributes": {"value": 1, "user": {"data": {"id": 5}}}})
        self.assertEqual((vote.value, vote.user_id), (1, 5))


if __name__ == '__main__':
    unittest.main()
