import pytest
from httpx import AsyncClient

FOURNISSEURS_API_PREFIX = "/api/v1/fournisseurs"


async def create_fournisseur(client: AsyncClient, code: str = "FRS-BOIS", nom: str = "Scierie du Jura", **extra) -> dict:
    payload = {"code": code, "nom": nom, "ville": "Dole", "pays": "France", "delai_livraison": 10}
    payload.update(extra)
    response = await client.post(FOURNISSEURS_API_PREFIX + "/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_fournisseur_success(test_client: AsyncClient):
    data = await create_fournisseur(test_client, email="contact@scierie-jura.fr", conditions_paiement="30 jours")
    assert data["code"] == "FRS-BOIS"
    assert data["actif"] is True
    assert data["email"] == "contact@scierie-jura.fr"
    assert data["date_creation"] is not None
    assert "id" in data


@pytest.mark.asyncio
async def test_create_fournisseur_duplicate_code(test_client: AsyncClient):
    await create_fournisseur(test_client)
    response = await test_client.post(FOURNISSEURS_API_PREFIX + "/", json={"code": "FRS-BOIS", "nom": "Autre"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_fournisseur_invalid_data(test_client: AsyncClient):
    response = await test_client.post(
        FOURNISSEURS_API_PREFIX + "/", json={"code": "X", "nom": "X", "email": "pas-un-email"}
    )
    assert response.status_code == 422

    response = await test_client.post(
        FOURNISSEURS_API_PREFIX + "/", json={"code": "Y", "nom": "Y", "delai_livraison": 400}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_read_fournisseur(test_client: AsyncClient):
    created = await create_fournisseur(test_client)
    response = await test_client.get(f"{FOURNISSEURS_API_PREFIX}/{created['id']}")
    assert response.status_code == 200
    assert response.json()["nom"] == "Scierie du Jura"

    response = await test_client.get(f"{FOURNISSEURS_API_PREFIX}/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_fournisseurs(test_client: AsyncClient):
    await create_fournisseur(test_client, code="F-2", nom="Visserie Martin", ville="Lyon")
    await create_fournisseur(test_client, code="F-1", nom="Acier Bernard")

    response = await test_client.get(FOURNISSEURS_API_PREFIX + "/")
    data = response.json()
    assert data["total"] == 2
    assert [f["nom"] for f in data["items"]] == ["Acier Bernard", "Visserie Martin"]

    response = await test_client.get(FOURNISSEURS_API_PREFIX + "/", params={"ville": "Lyon"})
    assert [f["code"] for f in response.json()["items"]] == ["F-2"]


@pytest.mark.asyncio
async def test_update_fournisseur(test_client: AsyncClient):
    created = await create_fournisseur(test_client)

    response = await test_client.patch(
        f"{FOURNISSEURS_API_PREFIX}/{created['id']}", json={"telephone": "03 84 00 00 00", "delai_livraison": 5}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["telephone"] == "03 84 00 00 00"
    assert data["delai_livraison"] == 5
    assert data["code"] == "FRS-BOIS"
    assert data["date_modification"] is not None

    response = await test_client.patch(f"{FOURNISSEURS_API_PREFIX}/9999", json={"nom": "Inconnu"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_deactivate_and_reactivate(test_client: AsyncClient):
    created = await create_fournisseur(test_client)

    response = await test_client.delete(f"{FOURNISSEURS_API_PREFIX}/{created['id']}")
    assert response.status_code == 200
    assert response.json()["actif"] is False

    response = await test_client.get(FOURNISSEURS_API_PREFIX + "/", params={"actif": True})
    assert response.json()["total"] == 0

    response = await test_client.post(f"{FOURNISSEURS_API_PREFIX}/{created['id']}/reactivation")
    assert response.json()["actif"] is True


@pytest.mark.asyncio
async def test_receipt_from_registered_supplier(test_client: AsyncClient, article):
    created = await create_fournisseur(test_client)
    receipt = {
        "type_mouvement": "ENTREE", "quantite": 4, "prix_unitaire": "12.00",
        "fournisseur_id": created["id"], "utilisateur": "magasinier",
    }

    response = await test_client.post(f"/api/v1/stock/{article.id}/mouvements", json=receipt)
    assert response.status_code == 200, response.text

    response = await test_client.get("/api/v1/stock-movements/", params={"fournisseur_id": created["id"]})
    entries = response.json()["items"]
    assert len(entries) == 1
    assert entries[0]["contrepartie"] == "Scierie du Jura"
