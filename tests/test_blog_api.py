"""
API tests for the community blog
"""
from datetime import datetime

import pytest
from bson import ObjectId

from conftest import ADMIN_ID, USER_ID, make_cursor

AUTHOR_EMAIL = "ravi@example.com"


@pytest.fixture
def post():
    """Published post by another member"""
    return {
        "_id": ObjectId(),
        "title": "Repotting a snake plant",
        "content": "Use a terracotta pot and gritty mix.",
        "excerpt": "Use a terracotta pot and gritty mix....",
        "author": "Ravi Kumar",
        "author_email": AUTHOR_EMAIL,
        "author_id": ADMIN_ID,
        "category": "success_story",
        "tags": ["succulents", "repotting"],
        "likes": [],
        "bookmarks": [],
        "shares": [],
        "comments": [],
        "status": "published",
        "approval_status": "approved",
        "created_at": datetime(2024, 6, 1),
        "updated_at": datetime(2024, 6, 1),
    }


class TestFeed:

    def test_lists_published_posts(self, anon_client, mock_db, post):
        cursor = make_cursor([post])
        mock_db.blogs.find.return_value = cursor
        mock_db.blogs.count_documents.return_value = 11

        response = anon_client.get("/api/blog", params={"page": 1, "limit": 10})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["total_posts"] == 11
        assert body["total_pages"] == 2
        assert body["has_next_page"] is True
        assert body["data"][0]["liked"] is False
        assert mock_db.blogs.find.call_args[0][0] == {"status": "published", "approval_status": "approved"}
        cursor.sort.assert_called_once_with("created_at", -1)

    def test_oldest_first(self, anon_client, mock_db):
        cursor = make_cursor([])
        mock_db.blogs.find.return_value = cursor

        anon_client.get("/api/blog", params={"sort": "oldest"})

        cursor.sort.assert_called_once_with("created_at", 1)

    def test_viewer_reactions(self, client, mock_db, post):
        post["likes"] = [{"user_email": "asha@example.com", "user_id": USER_ID}]
        mock_db.blogs.find.return_value = make_cursor([post])

        response = client.get("/api/blog")

        entry = response.json()["data"][0]
        assert entry["liked"] is True
        assert entry["like_count"] == 1
        assert entry["bookmarked"] is False

    def test_search_needs_two_characters(self, anon_client):
        response = anon_client.get("/api/blog/search", params={"q": "a"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Search query must be at least 2 characters long"

    def test_search_escapes_query(self, anon_client, mock_db, post):
        mock_db.blogs.find.return_value = make_cursor([post])

        response = anon_client.get("/api/blog/search", params={"q": "c++"})

        assert response.status_code == 200
        assert response.json()["query"] == "c++"
        query = mock_db.blogs.find.call_args[0][0]
        assert query["$and"][0]["$or"][0]["title"]["$regex"] == "c\\+\\+"

    def test_stats(self, anon_client, mock_db):
        mock_db.blogs.distinct.side_effect = [["a@x.com", "b@x.com", "c@x.com"], ["a@x.com"]]

        response = anon_client.get("/api/blog/stats")

        assert response.json()["data"] == {"total_members": 3, "active_today": 1}

    def test_top_contributors(self, anon_client, mock_db):
        mock_db.blogs.aggregate.return_value = make_cursor([
            {"_id": AUTHOR_EMAIL, "name": "Ravi Kumar", "post_count": 7},
            {"_id": "asha@example.com", "name": "Asha Menon", "post_count": 3},
        ])

        response = anon_client.get("/api/blog/top-contributors")

        assert response.json()["data"][1] == {
            "name": "Asha Menon", "email": "asha@example.com", "post_count": 3, "rank": 2
        }

    def test_trending_hashtags(self, anon_client, mock_db):
        mock_db.blogs.aggregate.return_value = make_cursor([{"_id": "monstera", "count": 12}])

        response = anon_client.get("/api/blog/trending-hashtags")

        assert response.json()["data"] == [{"tag": "#monstera", "count": 12}]
        pipeline = mock_db.blogs.aggregate.call_args[0][0]
        assert pipeline[-1] == {"$limit": 5}

    def test_my_posts_include_pending(self, client, mock_db):
        client.get("/api/blog/mine")

        assert mock_db.blogs.find.call_args[0][0] == {"author_email": "asha@example.com"}

    def test_saved_posts(self, client, mock_db):
        client.get("/api/blog/saved")

        assert mock_db.blogs.find.call_args[0][0] == {"bookmarks.user_email": "asha@example.com"}


class TestGetPost:

    def test_published_post(self, anon_client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        response = anon_client.get(f"/api/blog/{post['_id']}")

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Repotting a snake plant"

    def test_pending_post_hidden_from_others(self, client, mock_db, post):
        post.update(status="pending_approval", approval_status="pending")
        mock_db.blogs.find_one.return_value = post

        response = client.get(f"/api/blog/{post['_id']}")

        assert response.status_code == 404

    def test_pending_post_visible_to_author(self, client, mock_db, post):
        post.update(status="pending_approval", approval_status="pending", author_email="asha@example.com")
        mock_db.blogs.find_one.return_value = post

        response = client.get(f"/api/blog/{post['_id']}")

        assert response.status_code == 200

    def test_pending_post_visible_to_admin(self, admin_client, mock_db, post):
        post.update(status="rejected", approval_status="rejected", rejection_reason="Off topic")
        mock_db.blogs.find_one.return_value = post

        response = admin_client.get(f"/api/blog/{post['_id']}")

        assert response.json()["data"]["rejection_reason"] == "Off topic"

    def test_invalid_id(self, anon_client):
        response = anon_client.get("/api/blog/not-an-id")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid blog post ID"


class TestAuthoring:

    def test_create_goes_to_moderation(self, client, mock_db):
        response = client.post("/api/blog", json={
            "title": "  Pothos propagation  ",
            "content": "x" * 300,
            "category": "question",
            "tags": ["pothos"],
        })

        assert response.status_code == 201
        assert "sent for review" in response.json()["message"]

        doc = mock_db.blogs.insert_one.call_args[0][0]
        assert doc["title"] == "Pothos propagation"
        assert doc["status"] == "pending_approval"
        assert doc["approval_status"] == "pending"
        assert doc["author_email"] == "asha@example.com"
        assert doc["author_id"] == USER_ID
        assert doc["excerpt"] == "x" * 200 + "..."

    def test_title_length(self, client):
        response = client.post("/api/blog", json={"title": "t" * 201, "content": "body"})

        assert response.status_code == 422

    def test_create_requires_auth(self, anon_client):
        response = anon_client.post("/api/blog", json={"title": "Hi", "content": "body"})

        assert response.status_code == 401

    def test_edit_own_post(self, client, mock_db, post):
        post["author_email"] = "asha@example.com"
        mock_db.blogs.find_one.return_value = post

        response = client.put(f"/api/blog/{post['_id']}", json={"title": "Updated", "content": "New body"})

        assert response.status_code == 200
        update = mock_db.blogs.update_one.call_args[0][1]["$set"]
        assert update["title"] == "Updated"
        assert update["excerpt"] == "New body..."
        assert "tags" not in update

    def test_cannot_edit_others_post(self, client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        response = client.put(f"/api/blog/{post['_id']}", json={"title": "Mine now", "content": "body"})

        assert response.status_code == 403
        assert response.json()["detail"] == "You can only edit your own posts"

    def test_delete_own_post(self, client, mock_db, post):
        post["author_email"] = "asha@example.com"
        mock_db.blogs.find_one.return_value = post

        response = client.delete(f"/api/blog/{post['_id']}")

        assert response.status_code == 200
        mock_db.blogs.delete_one.assert_awaited_once_with({"_id": post["_id"]})

    def test_cannot_delete_others_post(self, client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        response = client.delete(f"/api/blog/{post['_id']}")

        assert response.status_code == 403
        mock_db.blogs.delete_one.assert_not_called()


class TestReactions:

    def test_like_notifies_author(self, client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        response = client.post(f"/api/blog/{post['_id']}/like")

        assert response.status_code == 200
        assert response.json()["liked"] is True
        update = mock_db.blogs.update_one.call_args[0][1]
        assert update["$push"]["likes"]["user_email"] == "asha@example.com"

        notification = mock_db.notifications.insert_one.call_args[0][0]
        assert notification["type"] == "blog_like"
        assert notification["user_id"] == ADMIN_ID

    def test_second_like_unlikes(self, client, mock_db, post):
        post["likes"] = [{"user_email": "asha@example.com", "user_id": USER_ID}]
        mock_db.blogs.find_one.return_value = post

        response = client.post(f"/api/blog/{post['_id']}/like")

        assert response.json()["liked"] is False
        assert mock_db.blogs.update_one.call_args[0][1] == {"$pull": {"likes": {"user_email": "asha@example.com"}}}
        mock_db.notifications.insert_one.assert_not_called()

    def test_liking_own_post_does_not_notify(self, client, mock_db, post):
        post["author_email"] = "asha@example.com"
        mock_db.blogs.find_one.return_value = post

        client.post(f"/api/blog/{post['_id']}/like")

        mock_db.notifications.insert_one.assert_not_called()

    def test_bookmark_toggle(self, client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        first = client.post(f"/api/blog/{post['_id']}/bookmark").json()
        assert first["bookmarked"] is True
        assert first["bookmark_count"] == 1
        assert first["message"] == "Post bookmarked"

        post["bookmarks"] = [{"user_email": "asha@example.com"}]
        second = client.post(f"/api/blog/{post['_id']}/bookmark").json()
        assert second["bookmarked"] is False
        assert second["bookmark_count"] == 0

    def test_comment(self, client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        response = client.post(f"/api/blog/{post['_id']}/comments", json={"content": "  Lovely!  "})

        assert response.status_code == 201
        comment = mock_db.blogs.update_one.call_args[0][1]["$push"]["comments"]
        assert comment["content"] == "Lovely!"
        assert comment["author"] == "Asha Menon"
        assert mock_db.notifications.insert_one.call_args[0][0]["type"] == "blog_comment"

    def test_blank_comment(self, client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        response = client.post(f"/api/blog/{post['_id']}/comments", json={"content": "   "})

        assert response.status_code == 400
        mock_db.blogs.update_one.assert_not_called()

    def test_share_counts_once(self, client, mock_db, post):
        mock_db.blogs.find_one.return_value = post

        assert client.post(f"/api/blog/{post['_id']}/share").json()["share_count"] == 1

        post["shares"] = [{"user_email": "asha@example.com", "user_id": USER_ID}]
        assert client.post(f"/api/blog/{post['_id']}/share").json()["share_count"] == 1
        mock_db.blogs.update_one.assert_awaited_once()

    def test_share_requires_auth(self, anon_client, post):
        response = anon_client.post(f"/api/blog/{post['_id']}/share")

        assert response.status_code == 401


class TestReactionsOnUnpublishedPosts:

    REACTIONS = [
        ("like", None),
        ("bookmark", None),
        ("comments", {"content": "Nice"}),
        ("share", None),
    ]

    @pytest.fixture
    def pending_post(self, post):
        post.update(status="pending_approval", approval_status="pending")
        return post

    @pytest.mark.parametrize("action,body", REACTIONS)
    def test_hidden_from_other_members(self, client, mock_db, pending_post, action, body):
        mock_db.blogs.find_one.return_value = pending_post

        response = client.post(f"/api/blog/{pending_post['_id']}/{action}", json=body)

        assert response.status_code == 404
        mock_db.blogs.update_one.assert_not_called()
        mock_db.notifications.insert_one.assert_not_called()

    @pytest.mark.parametrize("action,body", REACTIONS)
    def test_rejected_post_hidden(self, client, mock_db, post, action, body):
        post.update(status="rejected", approval_status="rejected")
        mock_db.blogs.find_one.return_value = post

        response = client.post(f"/api/blog/{post['_id']}/{action}", json=body)

        assert response.status_code == 404

    def test_author_can_react(self, client, mock_db, pending_post):
        pending_post["author_email"] = "asha@example.com"
        mock_db.blogs.find_one.return_value = pending_post

        response = client.post(f"/api/blog/{pending_post['_id']}/bookmark")

        assert response.status_code == 200
        assert response.json()["bookmarked"] is True

    def test_admin_can_react(self, admin_client, mock_db, pending_post):
        mock_db.blogs.find_one.return_value = pending_post

        response = admin_client.post(f"/api/blog/{pending_post['_id']}/comments", json={"content": "Needs a photo"})

        assert response.status_code == 201
