import logging

from odoo import api, exceptions, fields, models

from myparcel_export.batch_export import OrderBatchExport
from myparcel_export.config import ExportOptions

from ..services.odoo_store import OdooOrderStore, settings_from_env
from .product_template import FLAG_SELECTION
from .res_config_settings import PACKAGE_TYPE_SELECTION

_logger = logging.getLogger(__name__)


class MyParcelExportWizard(models.TransientModel):
    _name = "myparcel.export.wizard"
    _description = "Export Orders to MyParcel"

    order_ids = fields.Many2many("sale.order", string="Orders")
    request_type = fields.Selection(
        [("download", "Create and download labels"), ("concept", "Create concepts only")],
        default="download",
        required=True,
    )
    package_type = fields.Selection([("default", "Use default")] + PACKAGE_TYPE_SELECTION, default="default")
    only_recipient = fields.Selection(FLAG_SELECTION, default="default")
    signature = fields.Selection(FLAG_SELECTION, default="default")
    return_shipment = fields.Selection(FLAG_SELECTION, string="Return if no answer", default="default")
    large_format = fields.Selection(FLAG_SELECTION, default="default")
    age_check = fields.Selection(FLAG_SELECTION, default="default")
    insurance = fields.Integer(help="Insured amount in EUR, 0 for the configured default")
    digital_stamp_weight = fields.Integer(string="Digital Stamp Weight (g)")
    return_label = fields.Boolean(string="Also create return labels")
    paper_type = fields.Selection([("A4", "A4"), ("A6", "A6")], default="A4", required=True)
    positions = fields.Char(default="1;2;3;4", help="Start positions on the A4 sheet")

    @api.model
    def default_get(self, fields_list):
        res = super().default_get(fields_list)
        if self.env.context.get("active_model") == "sale.order":
            res["order_ids"] = [(6, 0, self.env.context.get("active_ids", []))]
        return res

    def _export_params(self):
        return {
            "request_type": self.request_type,
            "package_type": self.package_type,
            "only_recipient": self.only_recipient,
            "signature": self.signature,
            "return": self.return_shipment,
            "large_format": self.large_format,
            "age_check": self.age_check,
            "insurance": self.insurance or None,
            "digital_stamp_weight": self.digital_stamp_weight or None,
            "return_label": self.return_label,
            "paper_type": self.paper_type,
            "positions": self.positions,
        }

    def action_export(self):
        self.ensure_one()
        if not self.order_ids:
            raise exceptions.UserError("No items selected")

        settings = settings_from_env(self.env)
        export = OrderBatchExport(settings, OdooOrderStore(self.env))
        result = export.run(self.order_ids.ids, ExportOptions.from_params(self._export_params()))
        _logger.info(
            "MyParcel export of %d order(s) ended at %s with %d message(s)",
            len(self.order_ids),
            result.stage.value,
            len(result.messages),
        )

        if result.aborted:
            raise exceptions.UserError("\n".join(result.messages))

        if result.labels:
            return {
                "type": "ir.actions.act_url",
                "url": f"/web/content/{result.labels}?download=true",
                "target": "self",
            }

        exported = len(result.consignments)
        return {
            "type": "ir.actions.client",
            "tag": "display_notification",
            "params": {
                "title": "MyParcel",
                "message": "\n".join([f"{exported} consignment(s) exported."] + result.messages),
                "type": "warning" if result.messages else "success",
                "sticky": bool(result.messages),
            },
        }
