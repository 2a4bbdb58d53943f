"""Static routing and dataset constants.

Reference data that doesn't change with API calls: basin codes and their
Copernicus datasets, weather coverage boxes, land-cell query overrides.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from coastal_conditions.reference.basins import DATASETS as DATASETS
from coastal_conditions.reference.basins import DatasetConfig as DatasetConfig
from coastal_conditions.reference.basins import RegionCode as RegionCode
from coastal_conditions.reference.geography import BoundingBox as BoundingBox
from coastal_conditions.reference.overrides import COORDINATE_OVERRIDES as COORDINATE_OVERRIDES
