from helpers import ADMIN, BRONZE_USER, GOLD_USER, auth_headers, meal_payload, run


def test_registering_twice_stores_one_user(client, seeded_database):
    body = {"email": "newbie@mealmate.io", "username": "newbie"}

    first = client.post("/users", json=body)
    second = client.post("/users", json=body)

    assert first.json() == {"success": True, "created": True}
    assert second.json() == {"success": True, "created": False}
    assert run(seeded_database.users.count_documents({"email": "newbie@mealmate.io"})) == 1


def test_new_users_start_as_bronze_members(client, seeded_database):
    client.post("/users", json={"email": "newbie@mealmate.io", "role": "admin", "badge": "Gold"})

    user = run(seeded_database.users.find_one({"email": "newbie@mealmate.io"}))
    assert user["role"] == "member"
    assert user["badge"] == "Bronze"


def test_profile_includes_meal_count(client):
    client.post("/meals", json=meal_payload(), headers=auth_headers(ADMIN))
    client.post("/meals", json=meal_payload(title="Dal"), headers=auth_headers(ADMIN))

    response = client.get("/users/profile", headers=auth_headers(ADMIN))

    assert response.status_code == 200
    profile = response.json()
    assert profile["email"] == ADMIN
    assert profile["mealCount"] == 2


def test_profile_of_unregistered_caller_is_empty(client):
    response = client.get("/users/profile", headers=auth_headers("ghost@mealmate.io"))
    assert response.json() == {"mealCount": 0}


def test_admin_status(client):
    assert client.get("/users/admin", headers=auth_headers(ADMIN)).json() == {"admin": True}
    assert client.get("/users/admin", headers=auth_headers(GOLD_USER)).json() == {"admin": False}


def test_admin_lists_users_with_paging(client):
    response = client.get("/users", params={"limit": 2, "offset": 0}, headers=auth_headers(ADMIN))

    data = response.json()
    assert response.status_code == 200
    assert data["usersCount"] == 3
    assert len(data["users"]) == 2
    assert all(isinstance(u["_id"], str) for u in data["users"])


def test_suggestions_match_username_or_email_case_insensitively(client):
    response = client.get("/users/suggestions", params={"query": "GOLD"}, headers=auth_headers(ADMIN))

    emails = [u["email"] for u in response.json()]
    assert emails == [GOLD_USER]


def test_suggestions_treat_query_literally(client):
    response = client.get("/users/suggestions", params={"query": ".*"}, headers=auth_headers(ADMIN))
    assert response.json() == []


def test_admin_promotes_user(client, seeded_database):
    response = client.put(f"/users/admin/{GOLD_USER}", headers=auth_headers(ADMIN))

    assert response.status_code == 200
    assert response.json()["modifiedCount"] == 1
    assert run(seeded_database.users.find_one({"email": GOLD_USER}))["role"] == "admin"


def test_promoting_unknown_user_is_404(client):
    response = client.put("/users/admin/ghost@mealmate.io", headers=auth_headers(ADMIN))
    assert response.status_code == 404


def test_user_reviews_carry_only_the_callers_review(client, lunch_meal_id):
    client.put(f"/meals/{lunch_meal_id}/review", json={"review": "Great"}, headers=auth_headers(GOLD_USER))
    client.put(f"/meals/{lunch_meal_id}/review", json={"review": "Meh"}, headers=auth_headers(BRONZE_USER))

    response = client.get("/users/reviews", headers=auth_headers(GOLD_USER))

    reviews = response.json()
    assert len(reviews) == 1
    assert reviews[0]["_id"] == lunch_meal_id
    assert reviews[0]["reviews"] == {"email": GOLD_USER, "review": "Great"}
