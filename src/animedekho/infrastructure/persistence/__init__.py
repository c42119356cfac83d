from .mysql_repository import MySqlAnimeRepository, create_mysql_pool, mysql_repository

__all__ = ["MySqlAnimeRepository", "create_mysql_pool", "mysql_repository"]
