"""Community blog endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from bson import ObjectId
from typing import Optional
import logging
import re

from urbansprout.database import get_database
from urbansprout.api.deps import get_current_user, get_optional_user, is_admin
from urbansprout.core.notifications import notify
from urbansprout.models.blog import (
    BlogPost,
    BlogStatus,
    ApprovalStatus,
    Comment,
    Reaction,
    make_excerpt,
)
from urbansprout.models.notification import NotificationType
from urbansprout.schemas.blog import (
    BlogCreate,
    BlogUpdate,
    CommentCreate,
    CommentResponse,
    BlogPostResponse,
)
from urbansprout.utils.pagination import page_meta, page_window
from urbansprout.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

router = APIRouter()

PUBLISHED_FILTER = {
    "status": BlogStatus.PUBLISHED.value,
    "approval_status": ApprovalStatus.APPROVED.value,
}


def post_to_response(post: dict, viewer_email: Optional[str] = None) -> BlogPostResponse:
    """Convert database blog document to BlogPostResponse"""
    likes = post.get("likes", [])
    bookmarks = post.get("bookmarks", [])
    comments = post.get("comments", [])

    return BlogPostResponse(
        id=str(post["_id"]),
        title=post["title"],
        content=post["content"],
        excerpt=post.get("excerpt"),
        image=post.get("image"),
        author=post.get("author", ""),
        author_email=post.get("author_email", ""),
        category=post.get("category"),
        tags=post.get("tags", []),
        like_count=len(likes),
        bookmark_count=len(bookmarks),
        share_count=len(post.get("shares", [])),
        comment_count=len(comments),
        comments=[CommentResponse(**c) for c in comments],
        liked=bool(viewer_email) and any(r["user_email"] == viewer_email for r in likes),
        bookmarked=bool(viewer_email) and any(r["user_email"] == viewer_email for r in bookmarks),
        status=post.get("status", BlogStatus.PENDING_APPROVAL.value),
        approval_status=post.get("approval_status", ApprovalStatus.PENDING.value),
        rejection_reason=post.get("rejection_reason"),
        created_at=post.get("created_at", datetime.utcnow()),
        updated_at=post.get("updated_at", datetime.utcnow()),
    )


def sort_order(sort: str) -> int:
    return 1 if sort == "oldest" else -1


async def get_post_or_404(post_id: str, db: AsyncIOMotorDatabase) -> dict:
    if not validate_object_id(post_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid blog post ID"
        )

    post = await db.blogs.find_one({"_id": ObjectId(post_id)})

    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blog post not found"
        )

    return post


def is_published(post: dict) -> bool:
    return (
        post.get("status") == BlogStatus.PUBLISHED.value
        and post.get("approval_status") == ApprovalStatus.APPROVED.value
    )


async def get_visible_post_or_404(
    post_id: str,
    current_user: Optional[dict],
    db: AsyncIOMotorDatabase
) -> dict:
    """
    Fetch a post the viewer may see. Unpublished posts are visible only to
    their author and admins; everyone else gets a 404.
    """
    post = await get_post_or_404(post_id, db)
    viewer_email = current_user.get("email") if current_user else None

    if not is_published(post) and post.get("author_email") != viewer_email and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blog post not found"
        )

    return post


async def paginated_posts(
    query: dict,
    sort: str,
    page: int,
    limit: int,
    db: AsyncIOMotorDatabase,
    viewer_email: Optional[str] = None
) -> dict:
    cursor = db.blogs.find(query).sort("created_at", sort_order(sort)).skip(page_window(page, limit)).limit(limit)
    posts = await cursor.to_list(length=limit)
    total = await db.blogs.count_documents(query)
    meta = page_meta(total, page, limit)

    return {
        "success": True,
        "data": [post_to_response(p, viewer_email) for p in posts],
        "count": len(posts),
        "total_posts": total,
        "total_pages": meta["pages"],
        "current_page": page,
        "has_next_page": meta["has_next_page"],
        "has_prev_page": meta["has_prev_page"],
    }


async def notify_author(
    post: dict,
    actor: dict,
    type: NotificationType,
    title: str,
    message: str,
    db: AsyncIOMotorDatabase
):
    """Notify a post's author about someone else's activity"""
    if post.get("author_email") == actor.get("email"):
        return

    author_id = post.get("author_id")
    if not author_id:
        author = await db.users.find_one({"email": post.get("author_email")}, {"_id": 1})
        if not author:
            return
        author_id = str(author["_id"])

    await notify(
        db,
        author_id,
        post.get("author_email"),
        type,
        title,
        message,
        related_id=str(post["_id"]),
        related_model="Blog",
    )


# Feed and discovery

@router.get("")
async def list_posts(
    sort: str = "newest",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List published posts, newest first by default.
    """
    return await paginated_posts(
        PUBLISHED_FILTER, sort, page, limit, db,
        viewer_email=current_user.get("email") if current_user else None
    )


@router.get("/search")
async def search_posts(
    q: Optional[str] = None,
    sort: str = "newest",
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Search published posts by title, content, tags and author.
    """
    if not q or len(q.strip()) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query must be at least 2 characters long"
        )

    pattern = re.escape(q.strip())
    query = {
        "$and": [
            {"$or": [
                {"title": {"$regex": pattern, "$options": "i"}},
                {"content": {"$regex": pattern, "$options": "i"}},
                {"tags": {"$regex": pattern, "$options": "i"}},
                {"author": {"$regex": pattern, "$options": "i"}},
            ]},
            PUBLISHED_FILTER,
        ]
    }

    posts = await db.blogs.find(query).sort("created_at", sort_order(sort)).to_list(length=None)
    viewer_email = current_user.get("email") if current_user else None

    return {
        "success": True,
        "data": [post_to_response(p, viewer_email) for p in posts],
        "count": len(posts),
        "query": q,
    }


@router.get("/stats")
async def blog_stats(db: AsyncIOMotorDatabase = Depends(get_database)):
    """
    Community size: distinct authors overall and authors who posted today.
    """
    today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

    members = await db.blogs.distinct("author_email")
    active_today = await db.blogs.distinct("author_email", {"created_at": {"$gte": today}})

    return {
        "success": True,
        "data": {
            "total_members": len(members),
            "active_today": len(active_today),
        },
    }


@router.get("/top-contributors")
async def top_contributors(
    limit: int = Query(4, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    contributors = await db.blogs.aggregate([
        {"$group": {
            "_id": "$author_email",
            "name": {"$first": "$author"},
            "post_count": {"$sum": 1},
        }},
        {"$sort": {"post_count": -1}},
        {"$limit": limit},
    ]).to_list(length=limit)

    return {
        "success": True,
        "data": [
            {
                "name": c["name"],
                "email": c["_id"],
                "post_count": c["post_count"],
                "rank": rank,
            }
            for rank, c in enumerate(contributors, start=1)
        ],
    }


@router.get("/trending-hashtags")
async def trending_hashtags(
    limit: int = Query(5, ge=1, le=50),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Most used tags across published posts.
    """
    tags = await db.blogs.aggregate([
        {"$match": {**PUBLISHED_FILTER, "tags": {"$exists": True, "$ne": []}}},
        {"$unwind": "$tags"},
        {"$match": {"tags": {"$nin": [None, ""]}}},
        {"$group": {"_id": "$tags", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
        {"$limit": limit},
    ]).to_list(length=limit)

    return {
        "success": True,
        "data": [{"tag": f"#{t['_id']}", "count": t["count"]} for t in tags],
    }


@router.get("/mine")
async def my_posts(
    sort: str = "newest",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Posts written by the current user in any moderation state.
    """
    return await paginated_posts(
        {"author_email": current_user["email"]}, sort, page, limit, db,
        viewer_email=current_user["email"]
    )


@router.get("/saved")
async def saved_posts(
    sort: str = "newest",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Posts the current user has bookmarked.
    """
    return await paginated_posts(
        {"bookmarks.user_email": current_user["email"]}, sort, page, limit, db,
        viewer_email=current_user["email"]
    )


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get a post. Unpublished posts are only visible to their author and admins.
    """
    post = await get_visible_post_or_404(post_id, current_user, db)
    viewer_email = current_user.get("email") if current_user else None

    return {"success": True, "data": post_to_response(post, viewer_email)}


# Authoring

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: BlogCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Submit a post. It stays pending until an admin approves it.
    """
    content = post_data.content.strip()

    post = BlogPost(
        title=post_data.title.strip(),
        content=content,
        excerpt=make_excerpt(content),
        image=post_data.image,
        author=current_user.get("name", ""),
        author_email=current_user["email"],
        author_id=current_user["_id"],
        category=post_data.category,
        tags=post_data.tags,
    )
    post_doc = post.model_dump(exclude={"id"})

    result = await db.blogs.insert_one(post_doc)
    post_doc["_id"] = result.inserted_id
    logger.info(f"Blog post {result.inserted_id} submitted for review by {current_user['email']}")

    return {
        "success": True,
        "message": (
            "Thank you for your submission! Your blog post has been sent for review. "
            "We will notify you once it's approved and published."
        ),
        "data": post_to_response(post_doc, current_user["email"]),
    }


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    post_data: BlogUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    post = await get_post_or_404(post_id, db)

    if post.get("author_email") != current_user["email"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only edit your own posts"
        )

    content = post_data.content.strip()
    update = {
        "title": post_data.title.strip(),
        "content": content,
        "excerpt": make_excerpt(content),
        "updated_at": datetime.utcnow(),
    }
    if post_data.category:
        update["category"] = post_data.category.value
    if post_data.tags:
        update["tags"] = post_data.tags
    if post_data.image is not None:
        update["image"] = post_data.image

    await db.blogs.update_one({"_id": post["_id"]}, {"$set": update})
    updated = await db.blogs.find_one({"_id": post["_id"]})

    return {
        "success": True,
        "message": "Blog post updated successfully",
        "data": post_to_response(updated, current_user["email"]),
    }


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    post = await get_post_or_404(post_id, db)

    if post.get("author_email") != current_user["email"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own posts"
        )

    await db.blogs.delete_one({"_id": post["_id"]})
    logger.info(f"Blog post {post_id} deleted by {current_user['email']}")

    return {"success": True, "message": "Blog post deleted successfully"}


# Reactions

@router.post("/{post_id}/like")
async def toggle_like(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Like a post, or take the like back if already liked.
    """
    post = await get_visible_post_or_404(post_id, current_user, db)
    email = current_user["email"]
    already_liked = any(r["user_email"] == email for r in post.get("likes", []))

    if already_liked:
        await db.blogs.update_one({"_id": post["_id"]}, {"$pull": {"likes": {"user_email": email}}})
    else:
        reaction = Reaction(user_email=email, user_id=current_user["_id"]).model_dump()
        await db.blogs.update_one({"_id": post["_id"]}, {"$push": {"likes": reaction}})
        await notify_author(
            post, current_user, NotificationType.BLOG_LIKE,
            "New like on your post",
            f"{current_user.get('name', 'Someone')} liked your post \"{post['title']}\"",
            db
        )

    updated = await db.blogs.find_one({"_id": post["_id"]})

    return {
        "success": True,
        "message": "Post unliked" if already_liked else "Post liked",
        "liked": not already_liked,
        "data": post_to_response(updated, email),
    }


@router.post("/{post_id}/bookmark")
async def toggle_bookmark(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    post = await get_visible_post_or_404(post_id, current_user, db)
    email = current_user["email"]
    bookmarks = post.get("bookmarks", [])
    already_saved = any(r["user_email"] == email for r in bookmarks)

    if already_saved:
        await db.blogs.update_one({"_id": post["_id"]}, {"$pull": {"bookmarks": {"user_email": email}}})
        count = len(bookmarks) - 1
    else:
        reaction = Reaction(user_email=email, user_id=current_user["_id"]).model_dump()
        await db.blogs.update_one({"_id": post["_id"]}, {"$push": {"bookmarks": reaction}})
        count = len(bookmarks) + 1

    return {
        "success": True,
        "bookmarked": not already_saved,
        "bookmark_count": count,
        "message": "Post unbookmarked" if already_saved else "Post bookmarked",
    }


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    content = comment_data.content.strip()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content is required"
        )

    post = await get_visible_post_or_404(post_id, current_user, db)

    comment = Comment(
        author=current_user.get("name", ""),
        author_email=current_user["email"],
        user_id=current_user["_id"],
        content=content,
    )
    await db.blogs.update_one({"_id": post["_id"]}, {"$push": {"comments": comment.model_dump()}})

    await notify_author(
        post, current_user, NotificationType.BLOG_COMMENT,
        "New comment on your post",
        f"{current_user.get('name', 'Someone')} commented on your post \"{post['title']}\"",
        db
    )

    updated = await db.blogs.find_one({"_id": post["_id"]})

    return {
        "success": True,
        "message": "Comment added successfully",
        "data": post_to_response(updated, current_user["email"]),
    }


@router.post("/{post_id}/share")
async def share_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Record a share. Each user counts once.
    """
    post = await get_visible_post_or_404(post_id, current_user, db)
    shares = post.get("shares", [])
    already_shared = any(
        r.get("user_email") == current_user["email"] or r.get("user_id") == current_user["_id"]
        for r in shares
    )

    if not already_shared:
        reaction = Reaction(user_email=current_user["email"], user_id=current_user["_id"]).model_dump()
        await db.blogs.update_one({"_id": post["_id"]}, {"$push": {"shares": reaction}})

    return {
        "success": True,
        "message": "Post shared successfully",
        "share_count": len(shares) if already_shared else len(shares) + 1,
    }
