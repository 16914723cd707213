from conftest import auth


def test_any_user_can_list_categories(client, user, category):
    response = client.get("/api/categories", headers=auth(user))
    assert response.status_code == 200
    assert response.json()["categories"] == [{"id": category.id, "name": "Hardware"}]


def test_categories_are_ordered_by_name(client, admin):
    for name in ("Software", "Access", "Network"):
        client.post("/api/categories", json={"name": name}, headers=auth(admin))
    names = [c["name"] for c in client.get("/api/categories", headers=auth(admin)).json()["categories"]]
    assert names == ["Access", "Network", "Software"]


def test_writes_are_admin_only(client, user, agent, category):
    for actor in (user, agent):
        assert client.post("/api/categories", json={"name": "New"}, headers=auth(actor)).status_code == 403
        assert client.put(f"/api/categories/{category.id}", json={"name": "X"}, headers=auth(actor)).status_code == 403
        assert client.delete(f"/api/categories/{category.id}", headers=auth(actor)).status_code == 403


def test_create_and_rename(client, admin):
    created = client.post("/api/categories", json={"name": "  Printers "}, headers=auth(admin))
    assert created.status_code == 201
    category_id = created.json()["category"]["id"]
    assert created.json()["category"]["name"] == "Printers"

    renamed = client.put(f"/api/categories/{category_id}", json={"name": "Printing"}, headers=auth(admin))
    assert renamed.json()["category"]["name"] == "Printing"
    assert client.get(f"/api/categories/{category_id}", headers=auth(admin)).json()["category"]["name"] == "Printing"


def test_blank_name_is_rejected(client, admin):
    assert client.post("/api/categories", json={"name": "  "}, headers=auth(admin)).status_code == 400


def test_missing_category(client, admin):
    assert client.get("/api/categories/999", headers=auth(admin)).status_code == 404
    assert client.put("/api/categories/999", json={"name": "X"}, headers=auth(admin)).status_code == 404


def test_category_in_use_cannot_be_deleted(client, admin, ticket, category):
    response = client.delete(f"/api/categories/{category.id}", headers=auth(admin))
    assert response.status_code == 400
    assert response.json()["message"] == "Category is used by 1 ticket(s)"


def test_delete_unused_category(client, admin):
    category_id = client.post("/api/categories", json={"name": "Temp"}, headers=auth(admin)).json()["category"]["id"]
    assert client.delete(f"/api/categories/{category_id}", headers=auth(admin)).status_code == 200
    assert client.get(f"/api/categories/{category_id}", headers=auth(admin)).status_code == 404
