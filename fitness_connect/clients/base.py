"""Base client interface for the activity data API."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


class BaseClient(ABC):
    """Abstract base class for authenticated activity data clients."""

    @abstractmethod
    def get_username(self) -> str:
        """Return the username the current session belongs to."""
        pass

    @abstractmethod
    def get_activity_types(self) -> Any:
        """Get the catalog of activity types."""
        pass

    @abstractmethod
    def get_activity_list(self, start: int = 0, limit: int = 10) -> Any:
        """Get a page of activities."""
        pass

    @abstractmethod
    def get_activity_summary(self, activity_id: Union[int, str]) -> Any:
        """Get the summary of one activity."""
        pass

    @abstractmethod
    def get_activity_details(self, activity_id: Union[int, str]) -> Any:
        """Get the detailed samples of one activity."""
        pass

    @abstractmethod
    def get_extended_activity_details(self, activity_id: Union[int, str]) -> Any:
        """Get chart-enabled details of one activity."""
        pass

    @abstractmethod
    def get_data_file(self, data_type: str, activity_id: Union[int, str]) -> str:
        """Get the raw export file of one activity."""
        pass

    def download_activity(
        self, activity_id: Union[int, str], data_type: str, save_path: Path
    ) -> Path:
        """Download an activity file to ``save_path``."""
        content = self.get_data_file(data_type, activity_id)

        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w", encoding="utf-8") as f:
            f.write(content)

        logger.info(f"Downloaded activity {activity_id} to {save_path}")
        return save_path
