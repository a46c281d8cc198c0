import base64
import logging

from odoo import fields

from myparcel_export.config import ExportSettings, parse_flag, parse_int
from myparcel_export.shipment import Address, LineItem
from myparcel_export.store import (
    MYPARCEL_CARRIER_CODE,
    MYPARCEL_TRACK_TITLE,
    TRACK_NUMBER_CONCEPT,
    OrderRecord,
    OrderStore,
    ShipmentRecord,
    TrackRecord,
)

_logger = logging.getLogger(__name__)


def settings_from_env(env) -> ExportSettings:
    ICP = env["ir.config_parameter"].sudo()
    return ExportSettings.from_params(ICP.get_param)


def _line_item(product, quantity, price=0.0) -> LineItem:
    template = product.product_tmpl_id
    return LineItem(
        name=product.name,
        quantity=int(quantity or 0),
        weight=product.weight or 0.0,
        price=price or 0.0,
        product_id=product.default_code or product.id,
        classification=parse_int(template.myparcel_classification),
        country_of_manufacture=template.myparcel_country_of_origin.code or None,
        insurance=template.myparcel_insurance or None,
        options={
            "age_check": parse_flag(template.myparcel_age_check),
            "large_format": parse_flag(template.myparcel_large_format),
        },
    )


class OdooOrderStore(OrderStore):
    """``OrderStore`` backed by ``sale.order`` and its outgoing pickings."""

    def __init__(self, env):
        self.env = env

    def _order(self, order_id):
        return self.env["sale.order"].browse(order_id)

    def _pickings(self, sale_order):
        return sale_order.picking_ids.filtered(
            lambda p: p.picking_type_code == "outgoing" and p.state != "cancel"
        )

    def _track_record(self, track) -> TrackRecord:
        return TrackRecord(
            track_id=track.id,
            shipment_id=track.picking_id.id,
            order_id=track.order_id.id,
            qty=track.qty,
            carrier_code=track.carrier_code,
            title=track.title,
            consignment_id=track.consignment_id or None,
            track_number=track.track_number or None,
        )

    def load_order(self, order_id) -> OrderRecord:
        sale_order = self._order(order_id)
        sale_order.ensure_one()
        partner = sale_order.partner_shipping_id
        company = partner.parent_id.name if partner.parent_id else (partner.name if partner.is_company else "")
        items = [
            _line_item(line.product_id, line.product_uom_qty, line.price_unit)
            for line in sale_order.order_line
            if not line.display_type and line.product_id and line.product_id.type != "service"
        ]
        return OrderRecord(
            order_id=sale_order.id,
            order_number=sale_order.name,
            address=Address(
                street=[partner.street or "", partner.street2 or ""],
                postal_code=partner.zip or "",
                city=partner.city or "",
                country=partner.country_id.code or "",
                company=company or "",
                name=partner.name or "",
                phone=partner.phone or partner.mobile or "",
                email=partner.email or sale_order.partner_id.email or "",
            ),
            items=items,
            delivery_options=sale_order.myparcel_delivery_options or None,
        )

    def create_shipment(self, order: OrderRecord) -> None:
        sale_order = self._order(order.order_id)
        if sale_order.state in ("draft", "sent"):
            _logger.info("Confirming %s before MyParcel export", sale_order.name)
            sale_order.action_confirm()
        if not self._pickings(sale_order):
            _logger.warning("Order %s has no delivery order to ship", sale_order.name)

    def get_shipments(self, order: OrderRecord):
        sale_order = self._order(order.order_id)
        prices = {line.product_id.id: line.price_unit for line in sale_order.order_line}
        tracks = {track.picking_id.id: track for track in sale_order.myparcel_track_ids}
        shipments = []
        for picking in self._pickings(sale_order):
            moves = picking.move_ids.filtered(lambda m: m.state != "cancel")
            track = tracks.get(picking.id)
            shipments.append(
                ShipmentRecord(
                    shipment_id=picking.id,
                    order_id=sale_order.id,
                    total_qty=int(sum(moves.mapped("product_uom_qty"))),
                    items=[_line_item(m.product_id, m.product_uom_qty, prices.get(m.product_id.id)) for m in moves],
                    track=self._track_record(track) if track else None,
                )
            )
        return shipments

    def create_track(self, shipment: ShipmentRecord) -> TrackRecord:
        track = self.env["myparcel.track"].create(
            {
                "order_id": shipment.order_id,
                "picking_id": shipment.shipment_id,
                "qty": shipment.total_qty,
                "carrier_code": MYPARCEL_CARRIER_CODE,
                "title": MYPARCEL_TRACK_TITLE,
            }
        )
        return self._track_record(track)

    def update_track(self, track: TrackRecord, consignment_id, track_number) -> None:
        record = self.env["myparcel.track"].browse(track.track_id)
        record.write({"consignment_id": consignment_id, "track_number": track_number})
        track.consignment_id = consignment_id
        track.track_number = track_number

        printed = bool(track_number) and track_number != TRACK_NUMBER_CONCEPT
        record.order_id.myparcel_state = "printed" if printed else "exported"
        if printed:
            record.picking_id.carrier_tracking_ref = track_number

    def set_order_status(self, order_id, status: str) -> None:
        self._order(order_id).write({"myparcel_state": status})

    def send_track_email(self, order: OrderRecord, track: TrackRecord) -> None:
        sale_order = self._order(order.order_id)
        sale_order.message_post(
            body=f"Your order {order.order_number} is on its way. MyParcel tracking code: {track.track_number}",
            partner_ids=sale_order.partner_id.ids,
            message_type="comment",
            subtype_xmlid="mail.mt_comment",
        )

    def store_labels(self, pdf: bytes, order_ids):
        attachment = self.env["ir.attachment"].create(
            {
                "name": f"myparcel-labels-{fields.Datetime.now():%Y%m%d-%H%M%S}.pdf",
                "type": "binary",
                "datas": base64.b64encode(pdf),
                "mimetype": "application/pdf",
                "res_model": "sale.order",
                "res_id": order_ids[0] if order_ids else False,
            }
        )
        return attachment.id
