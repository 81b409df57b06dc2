import json

from arthub.utils.token import create_access_token

PASSWORD = "secret123"
GOOD_SIGNATURE = "good-signature"

ADDRESS = {
    "street": "12 Canvas Lane",
    "city": "Pune",
    "state": "MH",
    "zip_code": "411001",
    "country": "India",
}


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'user_id': user.id})}"}


def post_webhook(client, event, signature=GOOD_SIGNATURE):
    return client.post(
        "/orders/webhook",
        content=json.dumps(event),
        headers={"Content-Type": "application/json", "X-Razorpay-Signature": signature},
    )


def paid_event(link_id, payment_id="pay_test_1"):
    return {
        "event": "payment_link.paid",
        "payload": {
            "payment_link": {"entity": {"id": link_id, "status": "paid"}},
            "payment": {"entity": {"id": payment_id, "status": "captured"}},
        },
    }


def link_event(event_type, link_id):
    return {
        "event": event_type,
        "payload": {"payment_link": {"entity": {"id": link_id}}},
    }
