"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants
    ├── models.py         # Dataclasses for API responses (optional)
    └── {feature}.py      # Fetch functions (one per endpoint/concept)

Sources
-------
- ``copernicus/``: ocean physics, biogeochemistry and waves with a
  day-offset/bbox-padding fallback search (``retry.RetryFetchEngine``).
- ``weather/``: point weather through a tiered provider waterfall.
- ``tides/``: tide extremes from WorldTides.

Adding a new datasource
-----------------------
1. Create ``datasources/{name}/`` with files above.
   See ``tides/`` for a minimal example, ``copernicus/`` for a richer one.

2. Write fetch functions that return pydantic models or dataclasses::

       from coastal_conditions.services.http import session

       def fetch_something(lat, lon) -> SomethingReport | None:
           resp = session.get(API_URL, params={...})
           resp.raise_for_status()
           return SomethingReport.model_validate(resp.json())

3. Re-export public API in ``__init__.py`` with ``__all__``.

4. Wire into the pipeline (see ``flows/fetch.py``):
   - Add a ``@task`` that calls your fetch function
   - Pick a store tier + path (e.g. ``live/mydata.json``)
   - Call ``store.write(path, data, source="...", valid_until=...)``
   - Add the task call to ``fetch_point()``

5. Add tests in ``tests/test_{name}.py``.
"""
