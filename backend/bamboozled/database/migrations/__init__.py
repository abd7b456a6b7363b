"""Migration files, applied in filename order by MigrationManager"""
