from odoo import fields, models


class SaleOrder(models.Model):
    _inherit = "sale.order"

    myparcel_delivery_options = fields.Text(
        string="MyParcel Delivery Options", copy=False, help="JSON written by the checkout delivery widget"
    )
    myparcel_state = fields.Selection(
        [("new", "New"), ("exported", "Exported"), ("printed", "Label printed")],
        string="MyParcel Status",
        default="new",
        copy=False,
    )
    myparcel_track_ids = fields.One2many("myparcel.track", "order_id", string="MyParcel Tracks")
