from dampolicy.load.observations import (
    CSVDamSource,
    DamSource,
    InMemoryDamSource,
    parse_dam_id,
)
