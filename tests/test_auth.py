def test_signup_and_login(client, storage):
    response = client.post("/api/auth/signup", json={"username": "pharmacist1", "password": "s3cret"})

    assert response.status_code == 201
    assert response.json()["username"] == "pharmacist1"
    assert storage.users.get_by_username("pharmacist1").password != "s3cret"

    login = client.post("/api/auth/login", json={"username": "pharmacist1", "password": "s3cret"})
    assert login.status_code == 200
    assert login.json()["success"] is True


def test_duplicate_username_is_rejected(client):
    client.post("/api/auth/signup", json={"username": "nurse", "password": "a"})

    response = client.post("/api/auth/signup", json={"username": "nurse", "password": "b"})

    assert response.status_code == 400
    assert response.json()["message"] == "Username already exists"


def test_wrong_password_is_401(client):
    client.post("/api/auth/signup", json={"username": "nurse", "password": "a"})

    assert client.post("/api/auth/login", json={"username": "nurse", "password": "b"}).status_code == 401
    assert client.post("/api/auth/login", json={"username": "ghost", "password": "a"}).status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_password_longer_than_bcrypt_allows_is_400(client, storage):
    response = client.post("/api/auth/signup", json={"username": "u", "password": "x" * 100})

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["password"]
    assert storage.users.get_by_username("u") is None


def test_multibyte_password_counts_bytes(client):
    # 25 three-byte characters is 75 bytes
    response = client.post("/api/auth/signup", json={"username": "u", "password": "€" * 25})

    assert response.status_code == 400


def test_long_password_at_login_is_401(client):
    client.post("/api/auth/signup", json={"username": "nurse", "password": "x" * 72})

    response = client.post("/api/auth/login", json={"username": "nurse", "password": "y" * 100})

    assert response.status_code == 401
