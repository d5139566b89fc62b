"""HTTP tests for the league API with an in-memory store."""

import jwt

API = "/api/v1"


class TestAuth:
    def test_missing_header(self, client):
        response = client.post(f"{API}/ascents/", json={"name": "Slab", "absolute_grade": 3})
        assert response.status_code == 401

    def test_malformed_header(self, client):
        response = client.get(
            f"{API}/rankings/nickname/alice", headers={"Authorization": "Token abc"}
        )
        assert response.status_code == 401

    def test_token_without_subject(self, client):
        token = jwt.encode({"role": "anon"}, "x" * 32, algorithm="HS256")
        response = client.get(
            f"{API}/rankings/nickname/alice",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401


class TestClimbersApi:
    def test_register_and_fetch(self, client, as_user):
        response = client.post(
            f"{API}/climbers/",
            json={
                "first_name": "Alice",
                "last_name": "Crimper",
                "working_grade": 5,
                "ascents_of_next_grade": 2,
            },
            headers=as_user("alice"),
        )
        assert response.status_code == 200
        assert response.json()["running_score"] == 0

        climber = client.get(f"{API}/climbers/alice").json()
        assert climber["working_grade"] == 5
        assert climber["ascents_of_next_grade"] == 2
        assert climber["promotion_input_needed"] is False

    def test_register_twice(self, client, as_user, make_climber):
        make_climber("alice")
        response = client.post(
            f"{API}/climbers/",
            json={"first_name": "Alice", "last_name": "Crimper", "working_grade": 5},
            headers=as_user("alice"),
        )
        assert response.status_code == 400

    def test_register_rejects_oversized_next_grade_count(self, client, as_user):
        response = client.post(
            f"{API}/climbers/",
            json={
                "first_name": "Alice",
                "last_name": "Crimper",
                "working_grade": 2,
                "ascents_of_next_grade": 4,
            },
            headers=as_user("alice"),
        )
        assert response.status_code == 422

    def test_unknown_climber(self, client):
        assert client.get(f"{API}/climbers/nobody").status_code == 404
        assert client.get(f"{API}/climbers/nobody/promotion").status_code == 404


class TestAscentFlow:
    def test_log_promote_and_resolve(self, client, as_user, make_climber):
        make_climber("alice", working_grade=5, ascents_of_next_grade=5)

        response = client.post(
            f"{API}/ascents/",
            json={"name": "The Mandala", "absolute_grade": 6, "is_flash": True},
            headers=as_user("alice"),
        )
        assert response.status_code == 200
        logged = response.json()
        assert logged["points"] == 150
        assert logged["ascent"]["working_grade_when_sent"] == 5
        assert logged["promotion"] == {"promoted": True, "new_tier": 6}

        status = client.get(f"{API}/climbers/alice/promotion").json()
        assert status["state"] == "pending_promotion_input"
        assert status["reconciliation_range"] == [0, 7]

        rejected = client.put(
            f"{API}/climbers/alice/promotion",
            json={"ascents_of_next_grade": 8},
            headers=as_user("alice"),
        )
        assert rejected.status_code == 400

        resolved = client.put(
            f"{API}/climbers/alice/promotion",
            json={"ascents_of_next_grade": 3},
            headers=as_user("alice"),
        )
        assert resolved.status_code == 200
        assert resolved.json()["promotion_input_needed"] is False
        assert resolved.json()["ascents_of_next_grade"] == 3

    def test_cannot_resolve_someone_else(self, client, as_user, make_climber):
        make_climber("alice", promotion_input_needed=True)
        response = client.put(
            f"{API}/climbers/alice/promotion",
            json={"ascents_of_next_grade": 1},
            headers=as_user("bob"),
        )
        assert response.status_code == 403

    def test_logbook_and_delete(self, client, as_user, make_climber):
        make_climber("alice", working_grade=4)
        make_climber("bob", working_grade=4, first_name="Bob")
        ascent_id = client.post(
            f"{API}/ascents/",
            json={"name": "Slab", "absolute_grade": 3},
            headers=as_user("alice"),
        ).json()["ascent"]["id"]

        logbook = client.get(f"{API}/ascents/", params={"climber_id": "alice"}).json()
        assert [(a["id"], a["points"]) for a in logbook] == [(ascent_id, 75)]

        assert (
            client.delete(f"{API}/ascents/{ascent_id}", headers=as_user("bob")).status_code
            == 403
        )
        deleted = client.delete(f"{API}/ascents/{ascent_id}", headers=as_user("alice"))
        assert deleted.status_code == 200
        assert deleted.json()["running_score"] == 0
        assert client.delete(f"{API}/ascents/{ascent_id}", headers=as_user("alice")).status_code == 404

    def test_grade_chart(self, client, as_user, make_climber):
        make_climber("alice", working_grade=4)
        for grade in (3, 3, 5):
            client.post(
                f"{API}/ascents/",
                json={"name": "Problem", "absolute_grade": grade},
                headers=as_user("alice"),
            )

        chart = client.get(f"{API}/climbers/alice/grades").json()

        assert chart == [
            {"grade": 3, "sends": 2, "flashes": 0},
            {"grade": 5, "sends": 1, "flashes": 0},
        ]


class TestVotingApi:
    def test_propose_rank_and_read_back(self, client, as_user, make_climber):
        make_climber("alice")
        make_climber("bob", first_name="Bob")
        ids = []
        for nickname in ("Crimpy", "Sloper Queen"):
            response = client.post(
                f"{API}/candidates/nickname/alice",
                json={"nickname": nickname},
                headers=as_user("bob"),
            )
            assert response.status_code == 200
            ids.append(response.json()["id"])

        third = client.post(
            f"{API}/candidates/nickname/alice",
            json={"nickname": "Heel Hook"},
            headers=as_user("bob"),
        )
        assert third.status_code == 400

        saved = client.put(
            f"{API}/rankings/nickname/alice",
            json={"candidate_ids": [ids[1], ids[0]]},
            headers=as_user("bob"),
        )
        assert saved.status_code == 200
        assert [r["candidate"]["value"] for r in saved.json()] == ["Sloper Queen", "Crimpy"]

        mine = client.get(f"{API}/rankings/nickname/alice", headers=as_user("bob")).json()
        assert [r["rank"] for r in mine] == [1, 2]

    def test_duplicate_ranking_rejected(self, client, as_user, make_climber):
        make_climber("alice")
        candidate_id = client.post(
            f"{API}/candidates/nickname/alice",
            json={"nickname": "Crimpy"},
            headers=as_user("bob"),
        ).json()["id"]

        response = client.put(
            f"{API}/rankings/nickname/alice",
            json={"candidate_ids": [candidate_id, candidate_id]},
            headers=as_user("bob"),
        )
        assert response.status_code == 400

    def test_ranking_for_unknown_climber(self, client, as_user):
        response = client.get(f"{API}/rankings/nickname/nobody", headers=as_user("bob"))
        assert response.status_code == 404

    def test_unknown_subject_type(self, client, as_user, make_climber):
        make_climber("alice")
        response = client.get(f"{API}/candidates/belay_glasses/alice")
        assert response.status_code == 422

    def test_withdraw_candidate(self, client, as_user, make_climber):
        make_climber("alice")
        candidate_id = client.post(
            f"{API}/candidates/profile_photo/alice",
            json={"image_url": "https://img.example/alice.jpg"},
            headers=as_user("bob"),
        ).json()["id"]

        forbidden = client.delete(
            f"{API}/candidates/profile_photo/{candidate_id}", headers=as_user("cara")
        )
        assert forbidden.status_code == 403

        ok = client.delete(
            f"{API}/candidates/profile_photo/{candidate_id}", headers=as_user("bob")
        )
        assert ok.status_code == 200
        assert client.get(f"{API}/candidates/profile_photo/alice").json() == []


class TestMiscApi:
    def test_leaderboard(self, client, as_user, make_climber):
        make_climber("alice", running_score=300)
        make_climber("bob", first_name="Bob", running_score=500)

        board = client.get(f"{API}/leaderboard", headers=as_user("alice")).json()

        assert [e["climber_id"] for e in board] == ["bob", "alice"]
        assert board[1]["is_me"] is True

    def test_scoring_rules(self, client):
        rules = client.get(f"{API}/scoring").json()
        assert rules["base_points"] == 100
        assert rules["points_per_grade"] == 25

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
