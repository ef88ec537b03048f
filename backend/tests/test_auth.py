from stockroom.core.security import hash_password
from stockroom.models import AppUser


def _admin(db, email="admin@stockroom.io", password="secret123"):
    user = AppUser(FullName="Admin", Email=email, Role="admin", IsActive=True,
                   HashedPassword=hash_password(password))
    db.add(user)
    db.commit()
    return user


def _login(client, email, password):
    return client.post("/auth/login", data={"username": email, "password": password})


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_protected_routes_require_token(anon_client):
    r = anon_client.get("/products")
    assert r.status_code == 401
    assert r.json()["ok"] is False

    r = anon_client.get("/products", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_login_and_me(anon_client, db):
    _admin(db)

    r = _login(anon_client, "Admin@Stockroom.io", "secret123")
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert r.json()["token_type"] == "bearer"

    me = anon_client.get("/auth/me", headers=_bearer(token))
    assert me.status_code == 200
    assert me.json()["Email"] == "admin@stockroom.io"
    assert me.json()["Role"] == "admin"
    assert me.json()["LastLogin"] is not None


def test_login_wrong_password(anon_client, db):
    _admin(db)
    r = _login(anon_client, "admin@stockroom.io", "wrong-pass")
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid email or password"


def test_admin_registers_users_and_roles_are_enforced(anon_client, db, make_product, dept):
    _admin(db)
    admin_token = _login(anon_client, "admin@stockroom.io", "secret123").json()["access_token"]

    r = anon_client.post(
        "/auth/register",
        json={"full_name": "Ayşe Viewer", "email": "viewer@stockroom.io", "password": "viewer123", "role": "viewer"},
        headers=_bearer(admin_token),
    )
    assert r.status_code == 201
    assert r.json()["Role"] == "viewer"

    dup = anon_client.post(
        "/auth/register",
        json={"full_name": "Tekrar", "email": "viewer@stockroom.io", "password": "viewer123"},
        headers=_bearer(admin_token),
    )
    assert dup.status_code == 400

    viewer_token = _login(anon_client, "viewer@stockroom.io", "viewer123").json()["access_token"]
    make_product("SKU-1", stock=5)

    # okuma serbest, yazma store/admin
    assert anon_client.get("/products", headers=_bearer(viewer_token)).status_code == 200
    r = anon_client.post(
        "/stock-out",
        json={"sku": "SKU-1", "deptId": dept.DeptID, "quantity": 1},
        headers=_bearer(viewer_token),
    )
    assert r.status_code == 403

    # viewer kullanıcı açamaz
    r = anon_client.post(
        "/auth/register",
        json={"full_name": "X", "email": "x@stockroom.io", "password": "xxxxxx1"},
        headers=_bearer(viewer_token),
    )
    assert r.status_code == 403
