from enum import Enum


class ProductModel(str, Enum):
    """Formula slot: one sellable variant with its own formula and coefficients."""
    CAP_CLASSIC_SIMPLE = "cap_classic_simple"
    CAP_CLASSIC_SLATTED = "cap_classic_slatted"
    CAP_MODERN_SIMPLE = "cap_modern_simple"
    CAP_MODERN_SLATTED = "cap_modern_slatted"
    BOX_SMOOTH = "box_smooth"
    BOX_LAMELLAR = "box_lamellar"
    FLASHING_FLAT = "flashing_flat"
    FLASHING_PROFILED = "flashing_profiled"
    ADDON_MESH = "addon_mesh"
    ADDON_HEATPROOF = "addon_heatproof"
    ADDON_BOTTOM_CAP = "addon_bottom_cap"
    ADDON_MOUNT_FRAME = "addon_mount_frame"
    ADDON_MOUNT_SKELETON = "addon_mount_skeleton"

class ProductFamily(str, Enum):
    CAP = "cap"
    BOX = "box"
    FLASHING = "flashing"
    ADDON = "addon"

class CapModel(str, Enum):
    CLASSIC_SIMPLE = "classic_simple"
    CLASSIC_SLATTED = "classic_slatted"
    MODERN_SIMPLE = "modern_simple"
    MODERN_SLATTED = "modern_slatted"
    CUSTOM = "custom"  # "by sketch", priced individually

    @property
    def is_classic(self) -> bool:
        return self.value.startswith("classic")

class BoxModel(str, Enum):
    NONE = "none"
    SMOOTH = "smooth"
    LAMELLAR = "lamellar"

class FlashingModel(str, Enum):
    NONE = "none"
    FLAT = "flat"
    PROFILED = "profiled"

class AddonId(str, Enum):
    MESH = "mesh"
    HEATPROOF = "heatproof"
    BOTTOM_CAP = "bottom_cap"
    GAS_PASSTHROUGH = "gas_passthrough"
    MOUNT_FRAME = "mount_frame"
    MOUNT_SKELETON = "mount_skeleton"
