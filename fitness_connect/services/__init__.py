from fitness_connect.services.account import AccountService
from fitness_connect.services.download import DownloadService

__all__ = ['AccountService', 'DownloadService']
