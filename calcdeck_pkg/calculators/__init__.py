"""Registry of every calculator the engine ships.

Each configuration is validated when this package is imported, so a badly
authored calculator fails at load time instead of at render time.
"""

from ..contract import Calculator, validate_config
from . import (
    auto_loan,
    bmi,
    caloric_deficit,
    ideal_weight,
    roofing,
    tip,
    transfer_time,
    water_intake,
)

# Register available calculators here
AVAILABLE_CALCS = {
    module.CONFIG.id: Calculator(config=validate_config(module.CONFIG), compute=module.compute)
    for module in (
        auto_loan,
        tip,
        caloric_deficit,
        bmi,
        ideal_weight,
        transfer_time,
        water_intake,
        roofing,
    )
}


def get_calculator(calc_id):
    """
    Factory function to retrieve a registered calculator, or None.
    """
    return AVAILABLE_CALCS.get(calc_id)
