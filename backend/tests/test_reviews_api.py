"""
IdeaFlow Backend — Review API Tests
=====================================

The rating range is enforced by the reviews table's CHECK constraint, so
these tests go through a real SQLite database rather than a mocked session.
"""

import pytest


def _review(user_id, reviewer_id, rating, text="Great collaboration"):
    return {
        "userId": user_id,
        "reviewerId": reviewer_id,
        "reviewerName": "Rita",
        "reviewerPhoto": "/uploads/rita.png",
        "text": text,
        "rating": rating,
    }


class TestReviews:

    @pytest.mark.asyncio
    async def test_create_returns_full_list_for_subject(self, client, make_user):
        subject = await make_user("subject@example.com")
        reviewer = await make_user("rita@example.com")

        first = await client.post("/api/reviews", json=_review(subject, reviewer, 5, "Fast"))
        second = await client.post("/api/reviews", json=_review(subject, reviewer, 3, "Okay"))

        assert first.status_code == 200
        assert len(first.json()) == 1
        body = second.json()
        assert [r["text"] for r in body] == ["Fast", "Okay"]
        assert body[1]["rating"] == 3
        assert body[1]["reviewerName"] == "Rita"
        assert body[1]["userId"] == subject

    @pytest.mark.asyncio
    async def test_rating_above_range_rejected(self, client, make_user):
        subject = await make_user("subject@example.com")
        reviewer = await make_user("rita@example.com")

        response = await client.post("/api/reviews", json=_review(subject, reviewer, 6))

        assert response.status_code == 400
        assert response.json()["message"] == "Rating must be between 1 and 5"
        assert (await client.get(f"/api/reviews?userId={subject}")).json() == []

    @pytest.mark.asyncio
    async def test_rating_zero_rejected(self, client, make_user):
        subject = await make_user("subject@example.com")
        reviewer = await make_user("rita@example.com")

        response = await client.post("/api/reviews", json=_review(subject, reviewer, 0))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_text(self, client, make_user):
        subject = await make_user("subject@example.com")
        reviewer = await make_user("rita@example.com")
        payload = _review(subject, reviewer, 4)
        del payload["text"]

        response = await client.post("/api/reviews", json=payload)

        assert response.status_code == 400
        assert response.json()["details"]["fields"] == ["text"]

    @pytest.mark.asyncio
    async def test_unknown_subject(self, client, make_user):
        reviewer = await make_user("rita@example.com")

        response = await client.post("/api/reviews", json=_review(999, reviewer, 4))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_values_beyond_integer_column(self, client, make_user):
        subject = await make_user("subject@example.com")
        reviewer = await make_user("rita@example.com")

        huge_subject = await client.post("/api/reviews", json=_review(2**63, reviewer, 4))
        huge_rating = await client.post("/api/reviews", json=_review(subject, reviewer, 2**63))
        listed = await client.get(f"/api/reviews?userId={2**63}")

        assert huge_subject.status_code == 404
        assert huge_rating.status_code == 400
        assert huge_rating.json()["message"] == "Rating must be between 1 and 5"
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_list_filters_by_subject(self, client, make_user):
        anna = await make_user("anna@example.com")
        ben = await make_user("ben@example.com")
        await client.post("/api/reviews", json=_review(anna, ben, 4))
        await client.post("/api/reviews", json=_review(ben, anna, 2))

        about_anna = (await client.get(f"/api/reviews?userId={anna}")).json()
        everything = (await client.get("/api/reviews")).json()

        assert [r["reviewerId"] for r in about_anna] == [ben]
        assert len(everything) == 2
