from odoo import fields, models

PACKAGE_TYPE_SELECTION = [
    ("package", "Package"),
    ("mailbox", "Mailbox"),
    ("letter", "Letter"),
    ("digital_stamp", "Digital stamp"),
]


class ResConfigSettings(models.TransientModel):
    _inherit = "res.config.settings"

    myparcel_api_key = fields.Char(config_parameter="myparcel.api_key", string="MyParcel API Key")
    myparcel_carrier = fields.Selection(
        [("postnl", "PostNL"), ("bpost", "bpost"), ("dpd", "DPD")],
        config_parameter="myparcel.carrier",
        default="postnl",
    )
    myparcel_export_mode = fields.Selection(
        [("shipments", "Shipments"), ("pps", "Print service (fulfilment)")],
        config_parameter="myparcel.export_mode",
        default="shipments",
    )
    myparcel_weight_unit = fields.Selection(
        [("gram", "Gram"), ("kilo", "Kilogram")],
        config_parameter="myparcel.weight_unit",
        default="kilo",
        string="Product Weight Unit",
    )
    myparcel_country_of_origin = fields.Char(config_parameter="myparcel.country_of_origin", default="NL")
    myparcel_label_description = fields.Char(
        config_parameter="myparcel.label_description",
        help="Placeholders: %order_nr%, %delivery_date%, %product_id%, %product_name%, %product_qty%",
    )
    myparcel_default_package_type = fields.Selection(
        PACKAGE_TYPE_SELECTION, config_parameter="myparcel.default_package_type", default="package"
    )
    myparcel_default_only_recipient = fields.Boolean(config_parameter="myparcel.default_only_recipient")
    myparcel_default_signature = fields.Boolean(config_parameter="myparcel.default_signature")
    myparcel_default_return = fields.Boolean(config_parameter="myparcel.default_return")
    myparcel_default_large_format = fields.Boolean(config_parameter="myparcel.default_large_format")
    myparcel_default_age_check = fields.Boolean(config_parameter="myparcel.default_age_check")
    myparcel_default_insurance = fields.Integer(config_parameter="myparcel.default_insurance")
    myparcel_digital_stamp_default_weight = fields.Integer(
        config_parameter="myparcel.digital_stamp_default_weight", string="Digital Stamp Weight (g)"
    )
