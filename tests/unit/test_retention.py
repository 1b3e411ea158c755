from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from notifier.notifications.retention import RetentionSweeper, retention_cutoff


def test_retention_cutoff_is_thirty_days_back():
  now = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)

  assert retention_cutoff(now, 30) == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_sweeper_rejects_non_positive_retention():
  with pytest.raises(ValueError):
    RetentionSweeper(client_factory=lambda: None, retention_days=0)


@pytest.mark.anyio
async def test_sweep_deletes_old_documents_in_write_batches():
  client = MagicMock()
  query = client.collection.return_value.where.return_value
  query.stream.return_value = [MagicMock() for _ in range(501)]
  batch = client.batch.return_value
  now = datetime(2026, 3, 31, tzinfo=timezone.utc)

  deleted = await RetentionSweeper(client_factory=lambda: client, collection="notifications", retention_days=30).sweep(now)

  assert deleted == 501
  assert batch.delete.call_count == 501
  assert batch.commit.call_count == 2
  client.collection.assert_called_with("notifications")
  field_filter = client.collection.return_value.where.call_args.kwargs["filter"]
  assert field_filter.field_path == "createdAt"
  assert field_filter.op_string == "<"
  assert field_filter.value == datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.mark.anyio
async def test_sweep_with_nothing_to_delete_commits_nothing():
  client = MagicMock()
  client.collection.return_value.where.return_value.stream.return_value = []

  deleted = await RetentionSweeper(client_factory=lambda: client).sweep()

  assert deleted == 0
  client.batch.return_value.commit.assert_not_called()


@pytest.mark.anyio
async def test_sweep_without_client_raises():
  with pytest.raises(RuntimeError):
    await RetentionSweeper(client_factory=lambda: None).sweep()
