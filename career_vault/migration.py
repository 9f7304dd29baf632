"""
Legacy Row Migration — Batch encryption of rows stored before encryption.

Walks a table by primary key in configurable batches and encrypts every
personal column that still holds plaintext. Each batch runs in its own
transaction for resumability, and each row update runs in a savepoint so
a failing row does not abort the rest of its batch. The operation is
idempotent: values that already carry the ``ENC:`` marker are skipped.

Security Note:
    Plaintext exists in memory only while each row is being encrypted.
    Never log plaintext or ciphertext values; only row ids and counts.
"""
import asyncio
import logging
from typing import Any, Union

from .encryptor import FieldEncryptor
from .envelope import is_encrypted
from .fields import EntityFields, get_entity

logger = logging.getLogger("career_vault")


def _select_batch(entity: EntityFields, after_id: bool) -> str:
    columns = ", ".join(entity.encrypted)
    if after_id:
        return (
            f"SELECT id, {columns}\n"
            f"FROM {entity.table}\n"
            f"WHERE id > $1\n"
            f"ORDER BY id\n"
            f"LIMIT $2"
        )
    return (
        f"SELECT id, {columns}\n"
        f"FROM {entity.table}\n"
        f"ORDER BY id\n"
        f"LIMIT $1"
    )


def _update_row(entity: EntityFields, columns: list[str]) -> str:
    assignments = ", ".join(
        f"{name} = ${idx}" for idx, name in enumerate(columns, start=1)
    )
    return (
        f"UPDATE {entity.table}\n"
        f"SET {assignments}\n"
        f"WHERE id = ${len(columns) + 1}"
    )


async def encrypt_legacy_rows(
    db_pool: Any,
    encryptor: FieldEncryptor,
    entity: Union[EntityFields, str],
    batch_size: int = 100,
) -> dict:
    """Encrypt plaintext personal columns of every row in an entity table.

    Args:
        db_pool: asyncpg-compatible connection pool.
        encryptor: Configured field encryptor.
        entity: Entity field map, or its table name.
        batch_size: Number of rows to process per batch/transaction.

    Returns:
        Stats dict with keys: total, encrypted, skipped, errors.

    Raises:
        KeyError: If entity names an unknown table.
        ValueError: If batch_size is not positive.
    """
    if isinstance(entity, str):
        entity = get_entity(entity)
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    stats = {"total": 0, "encrypted": 0, "skipped": 0, "errors": 0}
    last_id = None
    batch_num = 0

    logger.info(
        "Starting legacy encryption of %s (batch_size=%d)",
        entity.table, batch_size,
    )

    while True:
        async with db_pool.acquire() as conn:
            if last_id is None:
                rows = await conn.fetch(
                    _select_batch(entity, after_id=False), batch_size,
                )
            else:
                rows = await conn.fetch(
                    _select_batch(entity, after_id=True), last_id, batch_size,
                )

        if not rows:
            break

        batch_num += 1
        logger.info("Processing batch %d (%d rows)", batch_num, len(rows))

        async with db_pool.acquire() as conn:
            tx = conn.transaction()
            await tx.start()
            try:
                for row in rows:
                    stats["total"] += 1
                    row_id = row["id"]
                    pending = [
                        name for name in entity.encrypted
                        if isinstance(row[name], str)
                        and row[name]
                        and not is_encrypted(row[name])
                    ]
                    if not pending:
                        stats["skipped"] += 1
                        continue
                    try:
                        values = [
                            await asyncio.to_thread(encryptor.encrypt, row[name])
                            for name in pending
                        ]
                        # nested transaction runs as a SAVEPOINT
                        async with conn.transaction():
                            await conn.execute(
                                _update_row(entity, pending), *values, row_id,
                            )
                    except Exception as err:
                        logger.error(
                            "Error encrypting %s row id=%s: %s",
                            entity.table, row_id, type(err).__name__,
                        )
                        stats["errors"] += 1
                        continue
                    stats["encrypted"] += 1

                await tx.commit()
            except Exception:
                await tx.rollback()
                raise

        last_id = rows[-1]["id"]

    logger.info("Legacy encryption of %s complete: %s", entity.table, stats)
    return stats
