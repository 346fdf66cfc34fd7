"""Garmin Connect activity data client.

Every call goes through the Connector owned by an ``AuthSessionManager``,
so a client only exists once its session has been authenticated.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from fitness_connect.auth import USERNAME_URL, AuthSessionManager
from fitness_connect.clients.base import BaseClient
from fitness_connect.config import Config
from fitness_connect.connector import Connector, Response
from fitness_connect.exceptions import UnexpectedResponseCodeError, ValidationError

logger = logging.getLogger(__name__)

DATA_TYPE_TCX = "tcx"
DATA_TYPE_GPX = "gpx"
DATA_TYPE_GOOGLE_EARTH = "kml"
DATA_TYPES = (DATA_TYPE_TCX, DATA_TYPE_GPX, DATA_TYPE_GOOGLE_EARTH)

ACTIVITY_TYPES_URL = f"{Config.CONNECT_BASE_URL}/proxy/activity-service-1.2/json/activity_types"
ACTIVITY_LIST_URL = f"{Config.CONNECT_BASE_URL}/proxy/activity-search-service-1.0/json/activities"
ACTIVITY_SUMMARY_URL = f"{Config.CONNECT_BASE_URL}/proxy/activity-service-1.3/json/activity/{{activity_id}}"
ACTIVITY_DETAILS_URL = f"{Config.CONNECT_BASE_URL}/proxy/activity-service-1.3/json/activityDetails/{{activity_id}}"
EXTENDED_DETAILS_URL = f"{Config.CONNECT_BASE_URL}/modern/proxy/activity-service/activity/{{activity_id}}/details"
DATA_FILE_URL = f"{Config.CONNECT_BASE_URL}/proxy/activity-service-1.2/{{data_type}}/activity/{{activity_id}}"

EXTENDED_DETAILS_PARAMS = {"maxChartSize": 1000, "maxPolylineSize": 1000}


def _activity_id(value: Union[int, str]) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid activity id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid activity id: {value!r}") from None


class GarminConnectClient(BaseClient):
    """Client for the Garmin Connect activity services.

    Constructing the client authenticates: cached cookies are reused when
    they are still valid, otherwise ``password`` is used for a full login.
    """

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        *,
        manager: Optional[AuthSessionManager] = None,
        connector: Optional[Connector] = None,
        session_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
    ):
        if manager is None:
            manager = AuthSessionManager(
                username,
                password,
                connector,
                session_dir=session_dir,
                timeout=timeout,
            )
        self.manager = manager

    @property
    def connector(self) -> Connector:
        return self.manager.connector

    @property
    def identifier(self) -> str:
        return self.manager.identifier

    @property
    def authenticated(self) -> bool:
        return self.manager.is_authenticated

    def _get(self, url: str, params: Optional[dict] = None) -> Response:
        response = self.connector.get(url, params=params)
        if response.status_code != 200:
            logger.error(f"GET {url} returned {response.status_code}")
            raise UnexpectedResponseCodeError(200, response.status_code)
        return response

    def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        return json.loads(self._get(url, params).body)

    def get_username(self) -> str:
        return self._get_json(USERNAME_URL).get("username", "")

    def get_activity_types(self) -> Any:
        return self._get_json(ACTIVITY_TYPES_URL)

    def get_activity_list(self, start: int = 0, limit: int = 10) -> Any:
        params = {"start": start, "limit": limit}
        return self._get_json(ACTIVITY_LIST_URL, params)

    def get_activity_summary(self, activity_id: Union[int, str]) -> Any:
        url = ACTIVITY_SUMMARY_URL.format(activity_id=_activity_id(activity_id))
        return self._get_json(url)

    def get_activity_details(self, activity_id: Union[int, str]) -> Any:
        url = ACTIVITY_DETAILS_URL.format(activity_id=_activity_id(activity_id))
        return self._get_json(url)

    def get_extended_activity_details(self, activity_id: Union[int, str]) -> Any:
        url = EXTENDED_DETAILS_URL.format(activity_id=_activity_id(activity_id))
        return self._get_json(url, dict(EXTENDED_DETAILS_PARAMS))

    def get_data_file(self, data_type: str, activity_id: Union[int, str]) -> str:
        """Get the raw tcx/gpx/kml export of an activity."""
        if data_type not in DATA_TYPES:
            raise ValidationError(f"Unsupported data type: {data_type}")

        url = DATA_FILE_URL.format(data_type=data_type, activity_id=_activity_id(activity_id))
        return self._get(url, {"full": "true"}).body

    def logout(self):
        self.manager.logout()

    def close(self):
        self.connector.close()
