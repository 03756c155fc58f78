"""
HTTP API tests: every endpoint, including the 400/409/422 paths.
"""

from fastapi.testclient import TestClient


def _players(n):
    return [{"id": i, "rating": 2000 - 10 * i} for i in range(1, n + 1)]


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"app_name": "Club Draw API", "status": "healthy"}


# ============================================================================
# Groups
# ============================================================================


def test_group_capacities(client: TestClient):
    response = client.get("/api/groups/capacities", params={"total_players": 20, "group_size": 6, "random_seed": 1})
    assert response.status_code == 200
    data = response.json()
    assert data["capacities"] == [5, 5, 5, 5]
    assert data["total_players"] == 20


def test_group_capacities_rejects_bad_size(client: TestClient):
    response = client.get("/api/groups/capacities", params={"total_players": 20, "group_size": 2})
    assert response.status_code == 400
    assert "Group size" in response.json()["detail"]


def test_partition_rank_policy(client: TestClient):
    response = client.post(
        "/api/groups/partition",
        json={"players": _players(12), "group_size": 4, "policy": "rank", "random_seed": 3},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["groups"] == [[1, 2, 3, 4], [5, 6, 7, 8], [9, 10, 11, 12]]
    assert data["group_sizes"] == [4, 4, 4]
    assert data["average_rating_by_group"]["0"] == 1975.0


def test_partition_unknown_policy(client: TestClient):
    response = client.post("/api/groups/partition", json={"players": _players(6), "policy": "zigzag"})
    assert response.status_code == 422


def test_partition_duplicate_ids(client: TestClient):
    players = _players(5) + [{"id": 1}]
    response = client.post("/api/groups/partition", json={"players": players})
    assert response.status_code == 400


# ============================================================================
# Brackets
# ============================================================================


def test_valid_seeds(client: TestClient):
    response = client.get("/api/brackets/valid-seeds", params={"player_count": 20})
    assert response.status_code == 200
    assert response.json() == {
        "player_count": 20,
        "bracket_size": 32,
        "rounds": 5,
        "valid_seed_counts": [0, 2, 4, 8],
    }


def test_valid_seeds_needs_two_players(client: TestClient):
    response = client.get("/api/brackets/valid-seeds", params={"player_count": 1})
    assert response.status_code == 422


def test_seed_bracket(client: TestClient):
    response = client.post("/api/brackets/seed", json={"players": _players(6), "num_seeds": 2, "random_seed": 7})
    assert response.status_code == 200
    data = response.json()
    assert data["bracket_size"] == 8
    assert data["bye_count"] == 2
    assert data["positions"][0] == 1
    assert data["positions"][7] == 2
    assert sorted(p for p in data["positions"] if p is not None) == [1, 2, 3, 4, 5, 6]


def test_seed_bracket_rejects_invalid_seed_count(client: TestClient):
    response = client.post("/api/brackets/seed", json={"players": _players(6), "num_seeds": 3})
    assert response.status_code == 400
    assert "Seed count" in response.json()["detail"]


def test_editor_round_trip(client: TestClient):
    state = {"positions": [1, 2, 3, None]}
    response = client.post(
        "/api/brackets/editor/gesture",
        json={"state": state, "event": {"kind": "pick_up", "slot": 1}},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["rejection"] is None
    assert data["state"]["drag"]["player_id"] == 1
    assert data["drop_targets"] == [1, 4]

    response = client.post(
        "/api/brackets/editor/gesture",
        json={"state": data["state"], "event": {"kind": "drop", "slot": 4}},
    )
    data = response.json()
    assert data["changed"] is True
    assert data["state"]["positions"] == [None, 2, 3, 1]
    assert data["state"]["drag"] is None
    assert data["drop_targets"] == []


def test_editor_rejection_is_not_an_error(client: TestClient):
    response = client.post(
        "/api/brackets/editor/gesture",
        json={"state": {"positions": [1, None, 3, 4]}, "event": {"kind": "pick_up", "slot": 1}},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["rejection"]["reason"] == "not_draggable"
    assert data["rejection"]["slot"] == 1
    assert data["state"]["positions"] == [1, None, 3, 4]
    assert data["changed"] is False


def test_editor_rejects_bad_bracket_length(client: TestClient):
    response = client.post(
        "/api/brackets/editor/gesture",
        json={"state": {"positions": [1, 2, 3]}, "event": {"kind": "release"}},
    )
    assert response.status_code == 400


def test_editor_unknown_gesture_kind(client: TestClient):
    response = client.post(
        "/api/brackets/editor/gesture",
        json={"state": {"positions": [1, 2]}, "event": {"kind": "shake"}},
    )
    assert response.status_code == 422


def test_submission_accepts_valid_bracket(client: TestClient):
    response = client.post("/api/brackets/submission", json={"positions": [1, None, 2, 3], "field_ids": [1, 2, 3]})
    assert response.status_code == 200
    data = response.json()
    assert data["byes"] == [1]
    assert data["first_round"][0]["winner_id"] == 1


def test_submission_with_occupied_holding(client: TestClient):
    response = client.post("/api/brackets/submission", json={"positions": [None, 2, 3, 4], "holding": 1})
    assert response.status_code == 409
    assert response.json()["detail"]["holding"] == 1


def test_submission_with_double_bye(client: TestClient):
    response = client.post("/api/brackets/submission", json={"positions": [1, 2, None, None]})
    assert response.status_code == 409
    assert response.json()["detail"]["double_bye_matches"] == [2]


def test_submission_with_bad_length(client: TestClient):
    response = client.post("/api/brackets/submission", json={"positions": [1, 2, 3]})
    assert response.status_code == 400


def test_bracket_structure(client: TestClient):
    response = client.post(
        "/api/brackets/structure",
        json={"positions": [1, 2, 3, 4], "winners": [{"round": 1, "position": 1, "winner_id": 2}]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["rounds"] == 2
    assert len(data["matches"]) == 3
    assert data["matches"][2]["member1_id"] == 2


def test_bracket_structure_rejects_bad_winner(client: TestClient):
    response = client.post(
        "/api/brackets/structure",
        json={"positions": [1, 2, 3, 4], "winners": [{"round": 1, "position": 1, "winner_id": 3}]},
    )
    assert response.status_code == 400


# ============================================================================
# Schedules and standings
# ============================================================================


def test_round_robin_schedule(client: TestClient):
    response = client.post("/api/schedules/round-robin", json={"player_ids": [1, 2, 3, 4, 5]})
    assert response.status_code == 200
    data = response.json()
    assert data["rounds_count"] == 5
    assert data["matches_count"] == 10
    assert all(r["bye_player"] is not None for r in data["rounds"])


def test_round_robin_rejects_duplicates(client: TestClient):
    response = client.post("/api/schedules/round-robin", json={"player_ids": [1, 1, 2]})
    assert response.status_code == 400


def test_fair_schedule(client: TestClient):
    response = client.post("/api/schedules/fair", json={"player_ids": [1, 2, 3], "played_pairs": [[1, 2]]})
    assert response.status_code == 200
    data = response.json()
    assert data["matches_count"] == 2
    pairs = {tuple(sorted((p["player_a"], p["player_b"]))) for r in data["rounds"] for p in r["pairings"]}
    assert pairs == {(1, 3), (2, 3)}


def test_swiss_round_with_scores(client: TestClient):
    response = client.post(
        "/api/schedules/swiss-round",
        json={
            "players": _players(4),
            "results": [
                {"player_a": 1, "player_b": 2, "score": "11-7 11-5"},
                {"player_a": 3, "player_b": 4, "sets_a": 3, "sets_b": 2},
            ],
            "round_number": 2,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["round_number"] == 2
    assert [(p["player_a"], p["player_b"]) for p in data["pairings"]] == [(1, 3), (2, 4)]


def test_swiss_round_rejects_unreadable_score(client: TestClient):
    response = client.post(
        "/api/schedules/swiss-round",
        json={"players": _players(4), "results": [{"player_a": 1, "player_b": 2, "score": "walkover"}]},
    )
    assert response.status_code == 400
    assert "Unreadable score" in response.json()["detail"]


def test_standings(client: TestClient):
    response = client.post(
        "/api/standings",
        json={
            "player_ids": [1, 2, 3],
            "results": [
                {"player_a": 1, "player_b": 2, "sets_a": 3, "sets_b": 1},
                {"player_a": 2, "player_b": 3, "forfeit_a": True},
            ],
        },
    )
    assert response.status_code == 200
    table = response.json()["standings"]
    assert [s["player_id"] for s in table] == [1, 3, 2]
    assert table[2] == {
        "player_id": 2,
        "position": 3,
        "wins": 0,
        "losses": 2,
        "sets_won": 1,
        "sets_lost": 4,
        "set_difference": -3,
    }


def test_standings_rejects_negative_sets(client: TestClient):
    response = client.post(
        "/api/standings",
        json={"player_ids": [1, 2], "results": [{"player_a": 1, "player_b": 2, "sets_a": -1}]},
    )
    assert response.status_code == 422


# ============================================================================
# Tournaments
# ============================================================================


def test_plan_round_robin(client: TestClient):
    response = client.post("/api/tournaments/plan", json={"type": "ROUND_ROBIN", "players": _players(4)})
    assert response.status_code == 200
    data = response.json()
    assert data["groups"] == [[1, 2, 3, 4]]
    assert len(data["schedules"]) == 1
    assert len(data["schedules"][0]) == 3


def test_plan_swiss(client: TestClient):
    response = client.post(
        "/api/tournaments/plan",
        json={"type": "SWISS", "options": {"number_of_rounds": 2}, "players": _players(4)},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["number_of_rounds"] == 2
    assert [(p["player_a"], p["player_b"]) for p in data["first_round"]["pairings"]] == [(1, 2), (3, 4)]


def test_plan_unknown_type(client: TestClient):
    response = client.post("/api/tournaments/plan", json={"type": "KNOCKOUT", "players": _players(4)})
    assert response.status_code == 400
    assert "Unknown tournament type" in response.json()["detail"]


def test_final_stage_playoff(client: TestClient):
    response = client.post(
        "/api/tournaments/final-stage",
        json={
            "type": "PRELIMINARY_WITH_FINAL_PLAYOFF",
            "options": {"final_size": 4},
            "players": _players(8),
            "groups": [
                {"player_ids": [1, 4, 5, 8], "results": [{"player_a": 1, "player_b": 4, "sets_a": 0, "sets_b": 3}]},
                {"player_ids": [2, 3, 6, 7]},
            ],
            "random_seed": 5,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "PLAYOFF"
    assert data["qualifiers"] == [4, 2, 3, 5]
    positions = data["positions"]
    assert positions[0] == 2
    assert positions[3] == 4
    assert sorted(positions[1:3]) == [3, 5]


def test_final_stage_needs_preliminary_format(client: TestClient):
    response = client.post(
        "/api/tournaments/final-stage",
        json={"type": "PLAYOFF", "players": _players(4), "groups": [{"player_ids": [1, 2, 3, 4]}]},
    )
    assert response.status_code == 400
