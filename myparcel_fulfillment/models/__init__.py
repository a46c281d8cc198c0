from . import myparcel_track
from . import product_template
from . import res_config_settings
from . import sale_order
from . import myparcel_export_wizard
