from odoo import fields, models

FLAG_SELECTION = [("default", "Use default"), ("yes", "Yes"), ("no", "No")]


class ProductTemplate(models.Model):
    _inherit = "product.template"

    myparcel_age_check = fields.Selection(FLAG_SELECTION, string="MyParcel Age Check", default="default")
    myparcel_large_format = fields.Selection(FLAG_SELECTION, string="MyParcel Large Format", default="default")
    myparcel_classification = fields.Char(string="HS Code", help="Customs classification for shipments outside the EU")
    myparcel_country_of_origin = fields.Many2one("res.country", string="Country of Manufacture")
    myparcel_insurance = fields.Integer(string="MyParcel Insurance (EUR)", help="0 uses the configured default")
