from odoo import fields, models


class MyParcelTrack(models.Model):
    """One MyParcel consignment per delivery order."""

    _name = "myparcel.track"
    _description = "MyParcel Track"
    _order = "id desc"

    order_id = fields.Many2one("sale.order", required=True, ondelete="cascade", index=True)
    picking_id = fields.Many2one("stock.picking", required=True, ondelete="cascade", index=True)
    qty = fields.Integer()
    carrier_code = fields.Char(default="myparcel", readonly=True)
    title = fields.Char(default="MyParcel")
    consignment_id = fields.Integer(string="MyParcel Consignment ID", index=True)
    track_number = fields.Char(help="Barcode, or 'concept' until the label is printed")

    _sql_constraints = [
        ("picking_uniq", "unique(picking_id)", "A delivery order can only have one MyParcel track."),
    ]
