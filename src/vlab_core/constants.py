# --- src/vlab_core/constants.py ---
import logging

logger = logging.getLogger(__name__)

# --- Numerical Conventions ---

#: Substitute magnitude used by the `guard()` formula helper whenever a quantity
#: (typically a denominator) is closer to zero than this value.
EPSILON: float = 1.0e-9

# --- Registry / Selection ---

#: Pseudo-category that matches every definition.
ALL_CATEGORIES: str = "all"

# --- History ---

#: Number of snapshots retained per lab, most recent first.
HISTORY_CAPACITY: int = 50

#: Storage key per lab, matching the key names used by the browser client.
LAB_HISTORY_KEYS = {
    "physics": "physics_experiments",
    "biology": "biology_experiments",
    "chemistry": "chemistry_experiments",
}

# --- Physical Constants (SI), shared by the packaged catalogs ---

STANDARD_GRAVITY: float = 9.81            # m/s^2
PLANCK_CONSTANT: float = 6.626e-34        # J*s
SPEED_OF_LIGHT: float = 3.0e8             # m/s
GRAVITATIONAL_CONSTANT: float = 6.674e-11 # N*m^2/kg^2
COULOMB_CONSTANT: float = 8.99e9          # N*m^2/C^2
STEFAN_BOLTZMANN: float = 5.67e-8         # W/(m^2*K^4)
GAS_CONSTANT: float = 8.314               # J/(mol*K)
VACUUM_PERMEABILITY: float = 1.2566e-6    # T*m/A

#: Identifiers every catalog formula may reference without declaring them.
#: Variables and outputs of a definition shadow these.
BUILTIN_FORMULA_CONSTANTS = {
    "g": STANDARD_GRAVITY,
    "h_planck": PLANCK_CONSTANT,
    "c_light": SPEED_OF_LIGHT,
    "G": GRAVITATIONAL_CONSTANT,
    "k_e": COULOMB_CONSTANT,
    "sigma_sb": STEFAN_BOLTZMANN,
    "R_gas": GAS_CONSTANT,
    "mu0": VACUUM_PERMEABILITY,
}

logger.debug("Defined core constants: EPSILON, HISTORY_CAPACITY, physical constants.")
