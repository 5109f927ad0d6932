"""
Repositories pour la gestion des données.

Ce module fournit des implémentations de repositories pour les utilisateurs, les quotas et le
catalogue public, avec des versions en mémoire et Redis.
"""

import json
import threading
from datetime import UTC, datetime
from typing import Any

import redis

# Décrément conditionnel atomique: ne décrémente que si le solde est strictement positif.
# Retourne le nouveau solde, -1 si épuisé, -2 si l'état de quota est absent.
DECREMENT_IF_POSITIVE_SCRIPT = """
local key = KEYS[1]
if redis.call('EXISTS', key) == 0 then
    return -2
end
local remaining = tonumber(redis.call('HGET', key, 'remaining') or '0')
if remaining <= 0 then
    return -1
end
return redis.call('HINCRBY', key, 'remaining', -1)
"""

# Remise à zéro d'un lot: n'écrit que les hashes existants, retire de l'index du tier les
# membres dont l'état a disparu. ARGV = [solde, clé d'index, id_1, ..., id_n].
RESET_BATCH_SCRIPT = """
local updated = 0
for i, key in ipairs(KEYS) do
    if redis.call('EXISTS', key) == 1 then
        redis.call('HSET', key, 'remaining', ARGV[1])
        updated = updated + 1
    else
        redis.call('SREM', ARGV[2], ARGV[i + 2])
    end
end
return updated
"""


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class InMemoryUserRepo:
    """Dépôt utilisateurs en mémoire (email indexée par scan simple)."""

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[str, dict[str, Any]] = {}

    def get(self, user_id: str) -> dict[str, Any] | None:
        """Retourne un utilisateur par id."""
        return self._db.get(user_id)

    def get_by_email(self, email: str) -> dict[str, Any] | None:
        """Recherche un utilisateur par email."""
        return next((u for u in self._db.values() if u.get("email") == email), None)

    def save(self, user: dict[str, Any]) -> dict[str, Any]:
        """Sauvegarde un utilisateur."""
        self._db[user["id"]] = user
        return user


class RedisUserRepo:
    """Dépôt utilisateurs via Redis avec index email->id (hash)."""

    def __init__(self, url: str):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)
        self.idx_key = "user:idx:email"

    def get(self, user_id: str) -> dict[str, Any] | None:
        """Charge l'utilisateur `user:{id}`."""
        raw = self.client.get(f"user:{user_id}")
        return json.loads(raw) if raw else None

    def get_by_email(self, email: str) -> dict[str, Any] | None:
        """Recherche un utilisateur par email via l'index Redis."""
        user_id = self.client.hget(self.idx_key, email)
        if not user_id:
            return None
        return self.get(user_id)

    def save(self, user: dict[str, Any]) -> dict[str, Any]:
        """Sauvegarde un utilisateur et met à jour l'index email."""
        key = f"user:{user['id']}"
        pipe = self.client.pipeline()
        pipe.set(key, json.dumps(user))
        pipe.hset(self.idx_key, user["email"], user["id"])
        pipe.execute()
        return user


class InMemoryQuotaRepo:
    """
    Dépôt de quotas en mémoire (utilisé pour dev/tests).

    Un verrou unique sérialise les lectures-modifications-écritures.
    """

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> dict[str, Any] | None:
        """Retourne `{user_id, tier, remaining}` ou None."""
        with self._lock:
            state = self._db.get(user_id)
            return dict(state) if state else None

    def save(self, user_id: str, tier: str, remaining: int) -> None:
        """Crée ou écrase l'état de quota d'un utilisateur."""
        with self._lock:
            self._db[user_id] = {"user_id": user_id, "tier": tier, "remaining": int(remaining)}

    def decrement_if_positive(self, user_id: str) -> int | None:
        """Décrémente atomiquement si solde > 0; retourne le nouveau solde, ou None sinon."""
        with self._lock:
            state = self._db.get(user_id)
            if not state or state["remaining"] <= 0:
                return None
            state["remaining"] -= 1
            return state["remaining"]

    def user_ids_by_tier(self, tier: str) -> list[str]:
        """Liste les utilisateurs d'un tier (requête par égalité de champ)."""
        with self._lock:
            return [uid for uid, s in self._db.items() if s["tier"] == tier]

    def set_remaining_many(self, user_ids: list[str], remaining: int, tier: str) -> int:
        """Fixe le solde de plusieurs utilisateurs en une opération tout-ou-rien."""
        with self._lock:
            missing = [uid for uid in user_ids if uid not in self._db]
            if missing:
                raise KeyError(f"quota_state_missing:{missing[0]}")
            for uid in user_ids:
                self._db[uid]["remaining"] = int(remaining)
            return len(user_ids)


class RedisQuotaRepo:
    """Dépôt de quotas adossé à Redis (hash `quota:{id}` + set `quota:tier:{tier}`)."""

    def __init__(self, url: str):
        """Crée un client Redis et enregistre les scripts Lua (décrément, remise à zéro)."""
        self.client = redis.Redis.from_url(url, decode_responses=True)
        self._decrement = self.client.register_script(DECREMENT_IF_POSITIVE_SCRIPT)
        self._reset_batch = self.client.register_script(RESET_BATCH_SCRIPT)

    @staticmethod
    def _key(user_id: str) -> str:
        return f"quota:{user_id}"

    def get(self, user_id: str) -> dict[str, Any] | None:
        """Charge l'état de quota, si présent."""
        raw = self.client.hgetall(self._key(user_id))
        if not raw or "tier" not in raw:
            return None
        return {"user_id": user_id, "tier": raw["tier"], "remaining": int(raw["remaining"])}

    def save(self, user_id: str, tier: str, remaining: int) -> None:
        """Écrit l'état et maintient l'index par tier dans une transaction."""
        previous = self.client.hget(self._key(user_id), "tier")
        pipe = self.client.pipeline(transaction=True)
        if previous and previous != tier:
            pipe.srem(f"quota:tier:{previous}", user_id)
        pipe.hset(self._key(user_id), mapping={"tier": tier, "remaining": int(remaining)})
        pipe.sadd(f"quota:tier:{tier}", user_id)
        pipe.execute()

    def decrement_if_positive(self, user_id: str) -> int | None:
        """Décrément conditionnel exécuté côté serveur (script Lua)."""
        result = int(self._decrement(keys=[self._key(user_id)]))
        return result if result >= 0 else None

    def user_ids_by_tier(self, tier: str) -> list[str]:
        """Membres de l'index `quota:tier:{tier}`, triés pour des lots stables."""
        return sorted(self.client.smembers(f"quota:tier:{tier}"))

    def set_remaining_many(self, user_ids: list[str], remaining: int, tier: str) -> int:
        """Applique un lot de manière atomique (script Lua); retourne le nombre d'états écrits."""
        return int(
            self._reset_batch(
                keys=[self._key(uid) for uid in user_ids],
                args=[int(remaining), f"quota:tier:{tier}", *user_ids],
            )
        )


class InMemoryCatalogRepo:
    """Catalogue public en mémoire, indexé par nom d'idée."""

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def upsert(self, entry: dict[str, Any]) -> dict[str, Any]:
        """Insère ou écrase l'entrée `entry['name']`."""
        record = {**entry, "updatedAt": _now_iso()}
        with self._lock:
            self._db[entry["name"]] = record
        return record

    def get(self, name: str) -> dict[str, Any] | None:
        """Retourne une entrée par nom."""
        with self._lock:
            return self._db.get(name)

    def list_entries(self) -> list[dict[str, Any]]:
        """Retourne toutes les entrées, triées par nom."""
        with self._lock:
            return [self._db[k] for k in sorted(self._db)]


class RedisCatalogRepo:
    """Catalogue public dans un hash Redis `catalog:ideas` (champ = nom)."""

    def __init__(self, url: str):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)
        self.key = "catalog:ideas"

    def upsert(self, entry: dict[str, Any]) -> dict[str, Any]:
        """Sérialise en JSON et écrase le champ `name`."""
        record = {**entry, "updatedAt": _now_iso()}
        self.client.hset(self.key, entry["name"], json.dumps(record))
        return record

    def get(self, name: str) -> dict[str, Any] | None:
        """Charge et désérialise une entrée, si présente."""
        raw = self.client.hget(self.key, name)
        return json.loads(raw) if raw else None

    def list_entries(self) -> list[dict[str, Any]]:
        """Retourne toutes les entrées, triées par nom."""
        raw = self.client.hgetall(self.key) or {}
        return [json.loads(raw[k]) for k in sorted(raw)]
