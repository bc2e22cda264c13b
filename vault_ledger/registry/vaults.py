"""Vault registry: vaults, per-user positions and per-user vault lists."""
from __future__ import annotations

from ..models import UserPosition, Vault


class VaultRegistry:
    def __init__(self) -> None:
        self._vaults: dict[int, Vault] = {}
        self._positions: dict[tuple[int, str], UserPosition] = {}
        self._user_vaults: dict[str, list[int]] = {}

    # ------------------------------------------------------------------
    # Vaults
    # ------------------------------------------------------------------

    def get_vault(self, vault_id: int) -> Vault | None:
        return self._vaults.get(vault_id)

    def put_vault(self, vault: Vault) -> None:
        self._vaults[vault.id] = vault

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def get_position(self, vault_id: int, user: str) -> UserPosition | None:
        return self._positions.get((vault_id, user))

    def put_position(self, vault_id: int, user: str, position: UserPosition) -> None:
        self._positions[(vault_id, user)] = position

    def delete_position(self, vault_id: int, user: str) -> None:
        self._positions.pop((vault_id, user), None)

    # ------------------------------------------------------------------
    # User vault lists
    # ------------------------------------------------------------------

    def user_vaults(self, user: str) -> list[int]:
        return list(self._user_vaults.get(user, ()))

    def add_user_vault(self, user: str, vault_id: int) -> None:
        """Append ``vault_id`` to the user's list unless already present."""
        ids = self._user_vaults.setdefault(user, [])
        if vault_id not in ids:
            ids.append(vault_id)
