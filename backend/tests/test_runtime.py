"""Score entry: status transitions, winner decision and synchronous advancement."""
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from robobracket.models.match import Match


@pytest.fixture
def bracket(client: TestClient):
    """4-team bracket through the API: match 1 = seed 1 v 4, match 2 = 2 v 3, match 3 = final."""
    event_id = client.post("/api/events", json={"name": "Runtime Cup"}).json()["id"]
    teams = []
    for seed in range(1, 5):
        response = client.post(
            f"/api/events/{event_id}/categories/sumo/teams", json={"name": f"Bot {seed}", "seed": seed}
        )
        teams.append(response.json()["id"])
    matches = client.post(f"/api/events/{event_id}/categories/sumo/bracket", json={}).json()["matches"]
    return {"event_id": event_id, "teams": teams, "matches": [m["id"] for m in matches]}


class TestStatusTransitions:
    def test_pending_to_in_progress(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        response = client.patch(f"/api/matches/{m1}", json={"status": "in_progress"})
        assert response.status_code == 200
        data = response.json()
        assert data["match"]["status"] == "in_progress"
        assert data["match"]["started_at"] is not None
        assert data["advancement"] is None

    def test_cannot_revert_to_pending(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        client.patch(f"/api/matches/{m1}", json={"status": "in_progress"})
        response = client.patch(f"/api/matches/{m1}", json={"status": "pending"})
        assert response.status_code == 422

    def test_completed_is_terminal(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        seed1 = bracket["teams"][0]
        client.patch(f"/api/matches/{m1}", json={"status": "completed", "winner_id": seed1})

        response = client.patch(f"/api/matches/{m1}", json={"status": "in_progress"})
        assert response.status_code == 422
        response = client.patch(f"/api/matches/{m1}", json={"winner_id": bracket["teams"][3]})
        assert response.status_code == 422

    def test_scores_are_frozen_after_completion(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        client.patch(f"/api/matches/{m1}", json={"score_a": 3, "score_b": 1})
        client.patch(f"/api/matches/{m1}", json={"status": "completed"})

        response = client.patch(f"/api/matches/{m1}", json={"score_b": 5})

        assert response.status_code == 422
        assert "score_b" in response.json()["detail"]
        match = client.get(f"/api/events/{bracket['event_id']}/categories/sumo/matches").json()[0]
        assert (match["score_a"], match["score_b"]) == (3, 1)

    def test_unknown_status(self, client: TestClient, bracket):
        response = client.patch(f"/api/matches/{bracket['matches'][0]}", json={"status": "paused"})
        assert response.status_code == 422

    def test_missing_match(self, client: TestClient):
        assert client.patch("/api/matches/999", json={"status": "in_progress"}).status_code == 404


class TestCompletion:
    def test_explicit_winner_advances(self, client: TestClient, bracket):
        m1, _, final_id = bracket["matches"]
        seed1 = bracket["teams"][0]

        response = client.patch(f"/api/matches/{m1}", json={"status": "completed", "winner_id": seed1})

        assert response.status_code == 200
        data = response.json()
        assert data["match"]["winner_id"] == seed1
        assert data["advancement"]["outcome"] == "advanced"
        assert data["advancement"]["target_match_id"] == final_id
        assert data["advancement"]["slot"] == "team_a_id"
        assert data["advancement_error"] is None

    def test_winner_from_scores(self, client: TestClient, bracket):
        _, m2, final_id = bracket["matches"]
        seed3 = bracket["teams"][2]

        response = client.patch(
            f"/api/matches/{m2}", json={"status": "completed", "score_a": 1, "score_b": 3}
        )

        assert response.json()["match"]["winner_id"] == seed3
        assert response.json()["advancement"]["slot"] == "team_b_id"

    def test_tie_needs_explicit_winner(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        response = client.patch(f"/api/matches/{m1}", json={"status": "completed", "score_a": 2, "score_b": 2})
        assert response.status_code == 422

    def test_winner_must_play_in_match(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        response = client.patch(
            f"/api/matches/{m1}", json={"status": "completed", "winner_id": bracket["teams"][1]}
        )
        assert response.status_code == 422

    def test_cannot_complete_before_both_teams_known(self, client: TestClient, bracket):
        final_id = bracket["matches"][2]
        response = client.patch(f"/api/matches/{final_id}", json={"status": "completed", "score_a": 1, "score_b": 0})
        assert response.status_code == 422

    def test_category_specific_scores_are_stored(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        response = client.patch(f"/api/matches/{m1}", json={"ko_points_a": 2, "time_b": 41.5})
        data = response.json()["match"]
        assert data["ko_points_a"] == 2
        assert data["time_b"] == 41.5
        assert data["status"] == "pending"

    def test_full_bracket_reports_champion(self, client: TestClient, bracket):
        m1, m2, final_id = bracket["matches"]
        seed1, seed2, _, _ = bracket["teams"]
        client.patch(f"/api/matches/{m1}", json={"status": "completed", "winner_id": seed1})
        client.patch(f"/api/matches/{m2}", json={"status": "completed", "winner_id": seed2})

        response = client.patch(f"/api/matches/{final_id}", json={"status": "completed", "winner_id": seed1})

        assert response.json()["advancement"]["outcome"] == "champion"
        result = client.get(f"/api/events/{bracket['event_id']}/categories/sumo/result").json()
        assert result["champion_team_id"] == seed1
        assert result["runner_up_team_id"] == seed2
        assert result["education_level"] is None
        assert client.get(f"/api/events/{bracket['event_id']}").json()["winners_confirmed"] is True


class TestAdvanceEndpoint:
    def test_rerun_is_idempotent(self, client: TestClient, bracket):
        m1 = bracket["matches"][0]
        client.patch(f"/api/matches/{m1}", json={"status": "completed", "winner_id": bracket["teams"][0]})

        response = client.post(f"/api/matches/{m1}/advance")

        assert response.status_code == 200
        assert response.json()["outcome"] == "already_advanced"

    def test_pending_match_rejected(self, client: TestClient, bracket):
        response = client.post(f"/api/matches/{bracket['matches'][0]}/advance")
        assert response.status_code == 422

    def test_slot_conflict_is_409(self, client: TestClient, session: Session, bracket):
        m1, _, final_id = bracket["matches"]
        seed1, seed2, _, _ = bracket["teams"]
        final = session.get(Match, final_id)
        final.team_a_id = seed2
        session.add(final)
        session.commit()

        response = client.patch(f"/api/matches/{m1}", json={"status": "completed", "winner_id": seed1})
        assert response.status_code == 200
        assert response.json()["advancement"] is None
        assert "already holds" in response.json()["advancement_error"]

        response = client.post(f"/api/matches/{m1}/advance")
        assert response.status_code == 409

    def test_conflict_halts_later_completions_until_cleared(self, client: TestClient, session: Session, bracket):
        m1, m2, final_id = bracket["matches"]
        seed1, seed2, _, _ = bracket["teams"]
        hold_url = f"/api/events/{bracket['event_id']}/categories/sumo/advancement-hold"
        final = session.get(Match, final_id)
        final.team_a_id = seed2
        session.add(final)
        session.commit()
        assert client.get(hold_url).status_code == 404

        client.patch(f"/api/matches/{m1}", json={"status": "completed", "winner_id": seed1})
        response = client.patch(f"/api/matches/{m2}", json={"status": "completed", "winner_id": seed2})

        assert response.status_code == 200
        assert response.json()["advancement"] is None
        assert "halted" in response.json()["advancement_error"]
        hold = client.get(hold_url).json()
        assert hold["match_id"] == m1
        assert "already holds" in hold["detail"]

        # Repair the final by hand, then lift the hold
        session.refresh(final)
        final.team_a_id = None
        session.add(final)
        session.commit()
        assert client.delete(hold_url).status_code == 200
        assert client.delete(hold_url).status_code == 404

        response = client.post(f"/api/events/{bracket['event_id']}/categories/sumo/resolve-advancements")
        assert response.json()["halted"] is False
        assert response.json()["teams_advanced"] == 2

    def test_resolve_advancements(self, client: TestClient, session: Session, bracket):
        m1, m2, final_id = bracket["matches"]
        seed1, seed2, _, _ = bracket["teams"]
        # Import results directly, bypassing advancement
        for match_id, winner in ((m1, seed1), (m2, seed2)):
            match = session.get(Match, match_id)
            match.status = "completed"
            match.winner_id = winner
            session.add(match)
        session.commit()

        response = client.post(f"/api/events/{bracket['event_id']}/categories/sumo/resolve-advancements")

        assert response.status_code == 200
        assert response.json()["teams_advanced"] == 2
        final = client.get(f"/api/events/{bracket['event_id']}/categories/sumo/matches?stage=bracket").json()[2]
        assert final["id"] == final_id
        assert (final["team_a_id"], final["team_b_id"]) == (seed1, seed2)
