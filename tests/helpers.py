from pathlib import Path
from typing import cast

from fastapi.testclient import TestClient

from clubhub.image_host import UploadedAsset


def register_and_login(client: TestClient, user_data: dict[str, str]) -> str:
    """Register a member and return their access token."""
    reg_response = client.post("/auth/register", json=user_data)
    assert reg_response.status_code == 201, reg_response.text

    login_response = client.post("/auth/login", json={"email": user_data["email"], "password": user_data["password"]})
    assert login_response.status_code == 200
    return cast(str, login_response.json()["tokens"]["access_token"])


def member_data(index: int) -> dict[str, str]:
    return {
        "name": f"Member {index}",
        "email": f"member{index}@example.com",
        "password": f"password{index:03d}",
        "registration_no": f"21BCS{index:03d}",
        "branch": "ECE",
        "semester": "3",
        "mobile": f"98765{index:05d}",
    }


def original_name(path: Path) -> str:
    # Temp files are stored as "{epoch ms}-{original name}"
    return Path(path).name.split("-", 1)[1]


class FakeImageHost:
    """In-memory image host recording every call.

    ``fail_uploads`` names original file names whose upload raises;
    ``fail_destroys`` names public ids whose deletion raises.
    """

    def __init__(self, fail_uploads: set[str] | None = None, fail_destroys: set[str] | None = None):
        self.fail_uploads = fail_uploads or set()
        self.fail_destroys = fail_destroys or set()
        self.upload_calls: list[str] = []
        self.destroy_calls: list[str] = []
        self.assets: dict[str, str] = {}
        self._counter = 0

    async def upload(self, path: Path, *, folder: str, timeout: float | None = None) -> UploadedAsset:
        name = original_name(path)
        self.upload_calls.append(name)
        assert Path(path).exists(), "upload called after the temp file was removed"
        if name in self.fail_uploads:
            raise RuntimeError(f"host rejected {name}")
        self._counter += 1
        public_id = f"{folder}/asset{self._counter:03d}"
        url = f"https://images.example.com/{public_id}"
        self.assets[public_id] = url
        return UploadedAsset(secure_url=url, public_id=public_id)

    async def destroy(self, public_id: str) -> None:
        self.destroy_calls.append(public_id)
        if public_id in self.fail_destroys:
            raise RuntimeError(f"cannot delete {public_id}")
        self.assets.pop(public_id, None)
