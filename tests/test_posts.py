POST_PAYLOAD = {
    "title": "Auditorium closed Friday",
    "content": "The auditorium will be closed on Friday for AV maintenance.",
}


def test_post_lifecycle(posts_client, auth_header):
    author = auth_header("user-a", email="a.officer@example.com")
    reader = auth_header("user-b")

    posts_client.put("/profiles/me", json={"display_name": "A. Officer", "department": "Admin"}, headers=author)

    created = posts_client.post("/posts", json=POST_PAYLOAD, headers=author)
    assert created.status_code == 201
    post_id = created.json()["id"]
    assert created.json()["author"] == {"user_id": "user-a", "display_name": "A. Officer", "department": "Admin"}

    listed = posts_client.get("/posts", headers=reader)
    assert listed.status_code == 200
    assert [post["id"] for post in listed.json()] == [post_id]
    assert listed.json()[0]["author"]["display_name"] == "A. Officer"
    assert "email" not in listed.json()[0]["author"]

    edited = posts_client.put(
        f"/posts/{post_id}", json=dict(POST_PAYLOAD, title="Auditorium closed Friday afternoon"), headers=author
    )
    assert edited.status_code == 200
    assert edited.json()["title"] == "Auditorium closed Friday afternoon"

    assert posts_client.delete(f"/posts/{post_id}", headers=reader).status_code == 404
    assert posts_client.delete(f"/posts/{post_id}", headers=author).status_code == 204
    assert posts_client.get("/posts", headers=reader).json() == []


def test_posts_are_listed_newest_first(posts_client, auth_header):
    headers = auth_header("user-a")
    first = posts_client.post("/posts", json=dict(POST_PAYLOAD, title="First update"), headers=headers).json()
    second = posts_client.post("/posts", json=dict(POST_PAYLOAD, title="Second update"), headers=headers).json()

    titles = [post["title"] for post in posts_client.get("/posts", headers=headers).json()]

    assert set(titles) == {first["title"], second["title"]}
    assert titles[0] == "Second update" or first["created_at"] == second["created_at"]


def test_post_without_profile_has_no_author(posts_client, auth_header):
    response = posts_client.post("/posts", json=POST_PAYLOAD, headers=auth_header("user-z"))

    assert response.status_code == 201
    assert response.json()["author"] is None


def test_post_validation(posts_client, auth_header):
    headers = auth_header("user-a")

    assert posts_client.post("/posts", json={"title": "Hi", "content": POST_PAYLOAD["content"]}, headers=headers).status_code == 422
    assert posts_client.post("/posts", json={"title": "Notice", "content": "Too short"}, headers=headers).status_code == 422


def test_cannot_edit_someone_elses_post(posts_client, auth_header):
    post_id = posts_client.post("/posts", json=POST_PAYLOAD, headers=auth_header("user-a")).json()["id"]

    response = posts_client.put(f"/posts/{post_id}", json=POST_PAYLOAD, headers=auth_header("user-b"))

    assert response.status_code == 404


def test_profile_defaults_to_email_local_part(posts_client, auth_header):
    headers = auth_header("user-a", email="jane.doe@example.com")

    response = posts_client.get("/profiles/me", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "user-a"
    assert data["display_name"] == "jane.doe"
    assert data["email"] == "jane.doe@example.com"


def test_profile_update_keeps_unset_fields(posts_client, auth_header):
    headers = auth_header("user-a", email="jane.doe@example.com")
    posts_client.put("/profiles/me", json={"department": "Legal"}, headers=headers)

    response = posts_client.put("/profiles/me", json={"display_name": "Jane Doe"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["display_name"] == "Jane Doe"
    assert response.json()["department"] == "Legal"


def test_posts_require_a_token(posts_client):
    assert posts_client.get("/posts").status_code == 401
