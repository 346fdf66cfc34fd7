from fitness_connect.clients.base import BaseClient
from fitness_connect.clients.garmin import DATA_TYPES, GarminConnectClient

__all__ = ['BaseClient', 'GarminConnectClient', 'DATA_TYPES']
