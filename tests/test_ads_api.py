import logging

from sqlalchemy import func, select

from board.models.ad import AdImage
from board.services import ads as ads_service
from board.services import antispam


def test_create_returns_token_once(client, make_ad, category):
    created = make_ad(title="Mountain bike", description="Good condition, barely used", price=250)

    assert created["status"] == "ACTIVE"
    assert created["categoryName"] == "Electronics"
    assert created["images"] == []
    assert len(created["editToken"]) == 64

    by_id = client.get(f"/api/ads/{created['id']}").json()
    assert "editToken" not in by_id

    listed = client.get("/api/ads").json()
    assert all("editToken" not in ad for ad in listed)

    page = client.get("/api/ads/search").json()
    assert all("editToken" not in ad for ad in page["content"])


def test_create_then_get_by_token_round_trips(client, make_ad, category, user):
    created = make_ad(
        title="Room for rent",
        description="Quiet room with a sea view",
        price="12000.50",
        userId=user.id,
        area="SRITHANU",
        pricePeriod="MONTH",
    )

    response = client.get(f"/api/ads/edit/{created['editToken']}")
    assert response.status_code == 200
    ad = response.json()
    assert ad["id"] == created["id"]
    assert ad["title"] == "Room for rent"
    assert ad["description"] == "Quiet room with a sea view"
    assert ad["price"] == 12000.5
    assert ad["categoryId"] == category.id
    assert ad["userId"] == user.id
    assert ad["userName"] == "Anna"
    assert ad["area"] == "SRITHANU"
    assert ad["pricePeriod"] == "MONTH"
    assert ad["status"] == "ACTIVE"
    assert ad["editToken"] == created["editToken"]
    assert ad["createdAt"] and ad["updatedAt"]


def test_unknown_token_is_plain_not_found(client, make_ad):
    make_ad()
    response = client.get("/api/ads/edit/not-a-real-token")
    assert response.status_code == 404
    assert "not-a-real-token" not in response.text


def test_create_with_missing_category(client):
    response = client.post("/api/ads", json={
        "title": "Mountain bike",
        "description": "Good condition, barely used",
        "price": 100,
        "categoryId": 999,
    })
    assert response.status_code == 404
    assert response.json()["entity"] == "Category"


def test_create_with_missing_user(client, category):
    response = client.post("/api/ads", json={
        "title": "Mountain bike",
        "description": "Good condition, barely used",
        "price": 100,
        "categoryId": category.id,
        "userId": 4242,
    })
    assert response.status_code == 404
    assert response.json()["entity"] == "User"


def test_field_validation_is_bad_request(client, category):
    response = client.post("/api/ads", json={
        "title": "Mountain bike",
        "description": "Good condition, barely used",
        "price": -1,
        "categoryId": category.id,
    })
    assert response.status_code == 400


def test_short_title_is_bad_request(client, category):
    response = client.post("/api/ads", json={
        "title": "Bike",
        "description": "Good condition, barely used",
        "price": 10,
        "categoryId": category.id,
    })
    assert response.status_code == 400
    assert "Title must be at least" in response.json()["detail"]


def test_partial_update_keeps_other_fields(client, make_ad, category):
    created = make_ad(title="Mountain bike", description="Good condition, barely used", price=100)

    response = client.put(f"/api/ads/{created['id']}", json={"price": 80, "title": None})
    assert response.status_code == 200
    ad = response.json()
    assert ad["price"] == 80
    assert ad["title"] == "Mountain bike"
    assert ad["description"] == "Good condition, barely used"
    assert ad["categoryId"] == category.id
    assert ad["updatedAt"] >= created["updatedAt"]
    assert "editToken" not in ad


def test_update_by_token_checks_category(client, make_ad, other_category):
    created = make_ad()
    token = created["editToken"]

    missing = client.put(f"/api/ads/edit/{token}", json={"categoryId": 999})
    assert missing.status_code == 404

    moved = client.put(f"/api/ads/edit/{token}", json={"categoryId": other_category.id})
    assert moved.status_code == 200
    assert moved.json()["categoryName"] == "Housing"


def test_owner_update_cannot_change_status(client, make_ad):
    created = make_ad()
    token = created["editToken"]

    response = client.put(f"/api/ads/edit/{token}", json={"status": "BLOCKED", "price": 1})
    assert response.status_code == 400

    ad = client.get(f"/api/ads/edit/{token}").json()
    assert ad["status"] == "ACTIVE"
    assert ad["price"] == 100


def test_update_rejects_unknown_fields(client, make_ad):
    created = make_ad()
    response = client.put(f"/api/ads/{created['id']}", json={"editToken": "mine-now"})
    assert response.status_code == 400
    assert client.get(f"/api/ads/edit/{created['editToken']}").status_code == 200


def test_update_unknown_ad(client):
    assert client.put("/api/ads/555", json={"price": 1}).status_code == 404


def test_delete_by_token_removes_ad_and_images(client, make_ad, db):
    created = make_ad()
    token = created["editToken"]
    upload = client.post(
        f"/api/ads/{created['id']}/images",
        files=[("files", ("a.jpg", b"jpeg-bytes", "image/jpeg"))],
        headers={"X-Edit-Token": token},
    )
    assert upload.status_code == 201

    response = client.delete(f"/api/ads/edit/{token}")
    assert response.status_code == 204

    assert client.get(f"/api/ads/{created['id']}").status_code == 404
    assert client.get(f"/api/ads/edit/{token}").status_code == 404
    assert client.delete(f"/api/ads/edit/{token}").status_code == 404

    remaining = db.execute(select(func.count(AdImage.id)).where(AdImage.ad_id == created["id"])).scalar_one()
    assert remaining == 0


def test_delete_by_id(client, make_ad):
    created = make_ad()
    assert client.delete(f"/api/ads/{created['id']}").status_code == 204
    assert client.get(f"/api/ads/{created['id']}").status_code == 404
    assert client.delete(f"/api/ads/{created['id']}").status_code == 404


def test_list_filter_precedence(client, make_ad, category, other_category, user):
    make_ad(title="Electronics ad", userId=user.id)
    make_ad(title="Housing ad", categoryId=other_category.id)

    by_category = client.get("/api/ads", params={"categoryId": other_category.id, "userId": user.id}).json()
    assert [ad["title"] for ad in by_category] == ["Housing ad"]

    by_user = client.get("/api/ads", params={"userId": user.id}).json()
    assert [ad["title"] for ad in by_user] == ["Electronics ad"]

    by_status = client.get("/api/ads", params={"status": "BLOCKED", "categoryId": category.id}).json()
    assert by_status == []

    assert len(client.get("/api/ads").json()) == 2


def test_list_by_missing_category_or_user(client):
    assert client.get("/api/ads", params={"categoryId": 999}).status_code == 404
    assert client.get("/api/ads", params={"userId": 999}).status_code == 404


def test_search_pagination_remainder(client, make_ad):
    for i in range(3):
        make_ad(title=f"Search item {i}")

    page = client.get("/api/ads/search", params={"page": 1, "size": 2}).json()
    assert len(page["content"]) == 1
    assert page["page"] == 1
    assert page["size"] == 2
    assert page["totalElements"] == 3
    assert page["totalPages"] == 2


def test_search_by_text_and_price_sort(client, make_ad):
    make_ad(title="iPhone 15", description="Brand new phone", price=1000)
    make_ad(title="Wireless Earbuds", description="AirPods from Apple", price=100)
    make_ad(title="Phone stand", description="Works with any iphone", price=50)

    found = client.get("/api/ads/search", params={"q": "IPHONE", "sortBy": "price", "sortDirection": "asc"}).json()
    assert [ad["title"] for ad in found["content"]] == ["Phone stand", "iPhone 15"]


def test_search_rejects_bad_paging(client):
    assert client.get("/api/ads/search", params={"page": -1}).status_code == 400
    assert client.get("/api/ads/search", params={"size": 0}).status_code == 400


def test_rate_limit_per_ip(client, make_ad, category, monkeypatch):
    monkeypatch.setattr(antispam.settings, "ANTISPAM_MAX_ADS_PER_HOUR", 3)
    for i in range(3):
        make_ad(title=f"Rate limited {i}", ip="192.168.1.10")

    payload = {
        "title": "Rate limit exceeded",
        "description": "This should fail due to rate limit",
        "price": 100,
        "categoryId": category.id,
    }
    blocked = client.post("/api/ads", json=payload, headers={"X-Forwarded-For": "192.168.1.10, 10.0.0.1"})
    assert blocked.status_code == 429

    allowed = client.post("/api/ads", json=payload, headers={"X-Forwarded-For": "192.168.1.11"})
    assert allowed.status_code == 201


def test_rate_limit_uses_real_ip_header(client, make_ad, category, monkeypatch):
    monkeypatch.setattr(antispam.settings, "ANTISPAM_MAX_ADS_PER_HOUR", 1)
    payload = {
        "title": "Real ip header",
        "description": "Posted through nginx proxy",
        "price": 5,
        "categoryId": category.id,
    }
    assert client.post("/api/ads", json=payload, headers={"X-Real-IP": "172.16.0.9"}).status_code == 201
    assert client.post("/api/ads", json=payload, headers={"X-Real-IP": "172.16.0.9"}).status_code == 429


def test_token_collision_is_rejected_without_overwrite(client, make_ad, category, monkeypatch):
    first = make_ad(title="First owner ad", price=10)
    monkeypatch.setattr(ads_service, "generate_edit_token", lambda: first["editToken"])

    response = client.post("/api/ads", json={
        "title": "Second owner ad",
        "description": "Should never replace the first one",
        "price": 20,
        "categoryId": category.id,
    })
    assert response.status_code == 409

    ad = client.get(f"/api/ads/edit/{first['editToken']}").json()
    assert ad["id"] == first["id"]
    assert ad["title"] == "First owner ad"
    assert ad["price"] == 10
    assert len(client.get("/api/ads").json()) == 1


def test_edit_token_never_reaches_logs(client, make_ad, caplog):
    created = make_ad()
    token = created["editToken"]

    with caplog.at_level(logging.INFO, logger="board"):
        client.get(f"/api/ads/edit/{token}")
        client.put(f"/api/ads/edit/{token}", json={"price": 5})
        client.get("/api/ads/edit/unknown-token-value")
        client.delete(f"/api/ads/edit/{token}")

    board_records = [r for r in caplog.records if r.name.startswith("board")]
    assert any("/api/ads/edit/" in r.getMessage() for r in board_records)
    for record in board_records:
        assert token not in record.getMessage()
        assert "unknown-token-value" not in record.getMessage()
