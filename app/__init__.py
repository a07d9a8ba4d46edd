"""
BORGA application package.

Layered architecture:

  app/errors.py       — error taxonomy (kind + structured info).
  app/schemas.py      — declarative request schemas, aggregated validation.
  app/repositories/   — storage: users, groups, the shared game catalog, tokens.
  app/services/       — authentication, argument checks, delegation to storage.

``borga.py`` builds one store, one catalog client and one
:class:`~app.services.BorgaService` at start-up and hands the service to the
Flask adapter in ``borga_web.py``.  Tests construct their own instances.
"""
