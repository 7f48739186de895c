def test_get_roles_returns_three_roles(client):
    """GET /api/v1/roles returns exactly the 3 roles created by migrations."""
    response = client.get("/api/v1/roles")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 3

    role_names = {role["name"] for role in data}
    assert role_names == {"admin", "manager", "worker"}

    for role in data:
        assert isinstance(role["id"], int)
        assert isinstance(role["name"], str)
