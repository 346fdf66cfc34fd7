"""Download service - save activity exports to disk."""

import logging
from pathlib import Path
from typing import Any, Optional

from fitness_connect.clients.garmin import DATA_TYPES, GarminConnectClient
from fitness_connect.config import Config
from fitness_connect.database import add_download_history
from fitness_connect.exceptions import FitnessConnectError, ValidationError

logger = logging.getLogger(__name__)


def extract_activity_ids(activity_list: Any) -> list[str]:
    """Pull activity IDs out of an activity list response.

    The search service wraps activities as
    ``{"results": {"activities": [{"activity": {"activityId": ...}}]}}``;
    newer list endpoints return a plain list of ``{"activityId": ...}``.
    """
    if isinstance(activity_list, dict):
        results = activity_list.get("results") or {}
        items = results.get("activities") if isinstance(results, dict) else None
    else:
        items = activity_list
    if not isinstance(items, list):
        return []

    ids = []
    for item in items:
        if not isinstance(item, dict):
            continue
        activity = item.get("activity", item)
        if not isinstance(activity, dict):
            continue
        activity_id = activity.get("activityId")
        if activity_id is not None:
            ids.append(str(activity_id))
    return ids


class DownloadService:
    """Service for downloading activity files."""

    def __init__(self, client: GarminConnectClient):
        self.client = client

    def download(
        self,
        start: int = 0,
        limit: int = 10,
        data_type: str = 'tcx',
        save_dir: Optional[Path] = None,
    ) -> dict:
        """Download a page of activities as ``data_type`` files."""
        if data_type not in DATA_TYPES:
            raise ValidationError(f"Unsupported data type: {data_type}")

        if save_dir is None:
            save_dir = Path(Config.DOWNLOADS_DIR) / self.client.identifier / data_type
        save_dir = Path(save_dir)

        activity_ids = extract_activity_ids(self.client.get_activity_list(start, limit))
        logger.info(f"Found {len(activity_ids)} activities to download")

        downloaded = []
        skipped = []
        failed = []

        for activity_id in activity_ids:
            save_path = save_dir / f"{activity_id}.{data_type}"

            if save_path.exists():
                logger.info(f"Skipping {activity_id}, already exists")
                skipped.append({'activity_id': activity_id, 'path': str(save_path)})
                continue

            try:
                self.client.download_activity(activity_id, data_type, save_path)
            except FitnessConnectError as e:
                logger.error(f"Failed to download activity {activity_id}: {e}")
                failed.append({'activity_id': activity_id, 'error': str(e)})
                continue

            add_download_history(
                identifier=self.client.identifier,
                activity_id=activity_id,
                data_type=data_type,
                file_path=str(save_path),
            )
            downloaded.append({'activity_id': activity_id, 'path': str(save_path)})

        return {
            'total': len(activity_ids),
            'downloaded': len(downloaded),
            'skipped': len(skipped),
            'failed': len(failed),
            'details': {
                'downloaded': downloaded,
                'skipped': skipped,
                'failed': failed
            }
        }
