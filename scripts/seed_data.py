#!/usr/bin/env python3
"""
Seed a running Article Tags API with sample articles and tags.

    uvicorn article_tags.main:app &
    python scripts/seed_data.py
"""

import os

import requests

API_URL = os.environ.get("API_URL", "http://localhost:8000/api/v1")
API_KEY = os.environ.get("API_KEY", "dev-api-key-change-in-production")
HEADERS = {"X-API-Key": API_KEY, "Content-Type": "application/json"}

ARTICLES = [
    {
        "title": "Async SQLAlchemy in practice",
        "body": "Sessions, eager loading and why lazy loads fail under asyncio.",
        "published": True,
        "tag_names": ["python", "sqlalchemy", "async"],
    },
    {
        "title": "Composite primary keys",
        "body": "Join tables keyed by the pair of foreign keys.",
        "published": True,
        "tag_names": ["databases", "sqlalchemy"],
    },
    {
        "title": "Inner vs outer joins",
        "body": "Which rows survive when one side is missing.",
        "published": False,
        "tag_names": ["databases", "sql"],
    },
    {
        "title": "FastAPI dependencies",
        "body": "Request-scoped sessions with yield dependencies.",
        "published": True,
        "tag_names": ["python", "fastapi"],
    },
]

EXTRA_TAGS = ["drafts", "archive"]


def create_article(article_data):
    """Create an article (and its tags) via API."""
    response = requests.post(f"{API_URL}/articles", headers=HEADERS, json=article_data, timeout=10)
    if response.status_code == 201:
        return response.json()
    print(f"Error creating article {article_data['title']}: {response.text}")
    return None


def create_tag(name):
    response = requests.post(f"{API_URL}/tags", headers=HEADERS, json={"name": name}, timeout=10)
    if response.status_code == 201:
        return response.json()
    print(f"Error creating tag {name}: {response.text}")
    return None


def main():
    print("Seeding articles and tags")

    created = 0
    for article_data in ARTICLES:
        article = create_article(article_data)
        if article:
            created += 1
            tags = ", ".join(t["name"] for t in article["tags"])
            print(f"  + {article['title']} (id={article['id']}) [{tags}]")

    for name in EXTRA_TAGS:
        tag = create_tag(name)
        if tag:
            print(f"  + tag {tag['name']} (id={tag['id']})")

    links = requests.get(f"{API_URL}/articles-tags", headers=HEADERS, timeout=10).json()
    print(f"Done: {created} articles, {links['total']} links")


if __name__ == "__main__":
    main()
