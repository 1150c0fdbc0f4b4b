from sqlalchemy import select

from photocatalog.models.user import User

from conftest import ADMIN_KEY, login_token, register


async def test_register_creates_user(client, context):
    response = await register(client, "bob", "pw-bob", "Bob B")

    assert response.status_code == 201
    body = response.json()
    assert isinstance(body["userId"], int)
    assert body["message"]

    async with context.session_factory() as session:
        user = await session.get(User, body["userId"])
    assert user.login == "bob"
    assert user.display_name == "Bob B"
    assert user.password_hash != "pw-bob"


async def test_register_requires_login_and_password(client):
    assert (await client.post("/register", json={"login": "bob"})).status_code == 400
    assert (await client.post("/register", json={"password": "x"})).status_code == 400
    assert (await client.post("/register", json={"login": "", "password": "x"})).status_code == 400
    assert (await client.post("/register")).status_code == 400

    response = await client.post("/register", json={"login": "bob"})
    assert "error" in response.json()


async def test_duplicate_login_conflicts_and_keeps_first_user(client, context):
    assert (await register(client, "bob", "first", "First")).status_code == 201

    response = await register(client, "bob", "second", "Second")
    assert response.status_code == 409
    assert "error" in response.json()

    async with context.session_factory() as session:
        users = (await session.execute(select(User).where(User.login == "bob"))).scalars().all()
    assert len(users) == 1
    assert users[0].display_name == "First"
    assert (await client.post("/login", json={"login": "bob", "password": "first"})).status_code == 200


async def test_login_returns_token_and_welcome(client):
    await register(client, "bob", "pw-bob", "Bob B")
    response = await client.post("/login", json={"login": "bob", "password": "pw-bob"})

    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["message"] == "Welcome, Bob B!"


async def test_login_welcome_falls_back_to_login(client):
    await register(client, "carol", "pw")
    response = await client.post("/login", json={"login": "carol", "password": "pw"})
    assert response.json()["message"] == "Welcome, carol!"


async def test_login_failures_share_status(client):
    await register(client, "bob", "pw-bob")

    wrong_password = await client.post("/login", json={"login": "bob", "password": "nope"})
    unknown_user = await client.post("/login", json={"login": "nobody", "password": "pw-bob"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


async def test_login_requires_fields(client):
    assert (await client.post("/login", json={"login": "bob"})).status_code == 400
    assert (await client.post("/login", json={"password": "pw"})).status_code == 400


async def test_change_password(client, auth_headers):
    response = await client.post(
        "/change-password",
        json={"oldPassword": "correct horse", "newPassword": "battery staple"},
        headers=auth_headers,
    )
    assert response.status_code == 200

    assert (await client.post("/login", json={"login": "alice", "password": "correct horse"})).status_code == 401
    assert (await client.post("/login", json={"login": "alice", "password": "battery staple"})).status_code == 200


async def test_change_password_with_wrong_old_password_keeps_hash(client, context, auth_headers):
    async with context.session_factory() as session:
        before = (await session.execute(select(User.password_hash).where(User.login == "alice"))).scalar_one()

    response = await client.post(
        "/change-password",
        json={"oldPassword": "wrong", "newPassword": "battery staple"},
        headers=auth_headers,
    )
    assert response.status_code == 401

    async with context.session_factory() as session:
        after = (await session.execute(select(User.password_hash).where(User.login == "alice"))).scalar_one()
    assert before == after


async def test_change_password_requires_fields_and_token(client, auth_headers):
    response = await client.post("/change-password", json={"oldPassword": "correct horse"}, headers=auth_headers)
    assert response.status_code == 400

    response = await client.post("/change-password", json={"oldPassword": "a", "newPassword": "b"})
    assert response.status_code == 401


async def test_change_password_for_vanished_user(client, context, auth_headers):
    async with context.session_factory() as session:
        user = (await session.execute(select(User).where(User.login == "alice"))).scalar_one()
        await session.delete(user)
        await session.commit()

    response = await client.post(
        "/change-password",
        json={"oldPassword": "correct horse", "newPassword": "x"},
        headers=auth_headers,
    )
    assert response.status_code == 404


async def test_admin_reset_password(client):
    await register(client, "bob", "old-pw")

    response = await client.post(
        "/admin/reset-password",
        json={"login": "bob", "newPassword": "new-pw"},
        headers={"X-Admin-Key": ADMIN_KEY},
    )
    assert response.status_code == 200
    assert "bob" in response.json()["message"]

    assert (await client.post("/login", json={"login": "bob", "password": "old-pw"})).status_code == 401
    assert await login_token(client, "bob", "new-pw")


async def test_admin_reset_unknown_login_mutates_nothing(client, context):
    await register(client, "bob", "old-pw")
    async with context.session_factory() as session:
        before = (await session.execute(select(User.login, User.password_hash))).all()

    response = await client.post(
        "/admin/reset-password",
        json={"login": "ghost", "newPassword": "new-pw"},
        headers={"X-Admin-Key": ADMIN_KEY},
    )
    assert response.status_code == 404

    async with context.session_factory() as session:
        after = (await session.execute(select(User.login, User.password_hash))).all()
    assert before == after


async def test_admin_reset_requires_fields(client):
    response = await client.post(
        "/admin/reset-password", json={"login": "bob"}, headers={"X-Admin-Key": ADMIN_KEY}
    )
    assert response.status_code == 400


async def test_admin_reset_rejects_bad_key(client, auth_headers):
    await register(client, "bob", "old-pw")
    body = {"login": "bob", "newPassword": "new-pw"}

    assert (await client.post("/admin/reset-password", json=body)).status_code == 403
    assert (
        await client.post("/admin/reset-password", json=body, headers={"X-Admin-Key": "guess"})
    ).status_code == 403
    # a user token is not an admin credential
    assert (await client.post("/admin/reset-password", json=body, headers=auth_headers)).status_code == 403
    assert await login_token(client, "bob", "old-pw")
