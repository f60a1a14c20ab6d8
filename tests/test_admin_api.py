import re

from fastapi.testclient import TestClient

from rtalks.payments import sign
from tests.conftest import RAZORPAY_SECRET
from tests.route_constant import (
    ADMIN_CONTACT_FORMS,
    ADMIN_CONTACT_FORMS_EXPORT,
    ADMIN_CONTACT_INFO,
    ADMIN_CONTENT,
    ADMIN_EVENT,
    ADMIN_ORDERS,
    ADMIN_PACKAGES,
    ADMIN_SPEAKERS,
    ADMIN_STATS,
    CONTACT,
    CONTACT_INFO,
    CONTENT,
    EVENT,
    PACKAGES,
    SPEAKERS,
    VERIFY_PAYMENT,
)

NEW_PACKAGE = {
    'name': 'Student Pass',
    'category': 'Student',
    'price': 99,
    'features': ['Certificate of Participation'],
    'package_type': 'student',
}
NEW_SPEAKER = {
    'name': 'Priya Raman',
    'title': 'CHRO',
    'company': 'Acme',
    'bio': 'Builds hiring teams.',
    'image_url': '/uploads/priya.png',
}
CONTACT_BODY = {
    'name': 'Arun Kumar',
    'email': 'arun@example.com',
    'phone': '9876543210',
    'message': 'Do you offer group discounts?',
}


class TestDashboard:
    def test_stats_count_completed_orders_only(self, admin_client: TestClient, create_order):
        paid = create_order()
        create_order()
        admin_client.post(VERIFY_PAYMENT, json={
            'orderId': paid,
            'paymentId': 'pay_1',
            'signature': sign(RAZORPAY_SECRET, paid, 'pay_1'),
        })

        response = admin_client.get(ADMIN_STATS)
        assert response.status_code == 200
        assert response.json() == {'totalTickets': 1, 'totalRevenue': 299.0, 'todaySales': 1}

    def test_stats_on_empty_store(self, admin_client: TestClient):
        assert admin_client.get(ADMIN_STATS).json() == {
            'totalTickets': 0, 'totalRevenue': 0.0, 'todaySales': 0,
        }

    def test_orders_newest_first(self, admin_client: TestClient, create_order):
        ids = [create_order() for _ in range(3)]
        orders = admin_client.get(ADMIN_ORDERS).json()
        assert [o['id'] for o in orders] == sorted(ids, reverse=True)
        assert set(orders[0]) == {
            'id', 'customer_name', 'customer_email', 'amount', 'status', 'created_at',
        }

    def test_orders_capped_at_fifty(self, admin_client: TestClient, sql):
        for i in range(55):
            sql(
                "INSERT INTO orders (customer_name, customer_email, customer_phone,"
                " package_name, amount, status) VALUES"
                " (:n, 'a@b.co', '9876543210', 'Executive', 2999, 'pending')",
                {'n': f'Buyer {i}'},
            )
        assert len(admin_client.get(ADMIN_ORDERS).json()) == 50

    def test_update_event(self, admin_client: TestClient):
        response = admin_client.put(ADMIN_EVENT, json={
            'title': 'R-Talks 2026',
            'description': 'Second edition',
            'date': '2026-02-20',
            'time': '10:30:00',
            'location': 'Coimbatore',
            'price': 3499,
        })
        assert response.status_code == 200

        event = admin_client.get(EVENT).json()
        assert event['title'] == 'R-Talks 2026'
        assert event['date'] == '2026-02-20'
        assert event['time'] == '10:30:00'
        assert event['price'] == 3499.0

    def test_update_event_requires_fields(self, admin_client: TestClient):
        response = admin_client.put(ADMIN_EVENT, json={'title': 'x'})
        assert response.status_code == 400


class TestSiteContent:
    def test_update_existing_section(self, admin_client: TestClient):
        response = admin_client.put(f'{ADMIN_CONTENT}/hero', json={
            'title': 'New hero',
            'subtitle': 'Sub',
            'description': 'Desc',
            'content_data': {'buttons': []},
        })
        assert response.status_code == 200

        hero = admin_client.get(f'{CONTENT}/hero').json()
        assert hero['title'] == 'New hero'
        assert hero['content_data'] == {'buttons': []}

    def test_unknown_section_is_created(self, admin_client: TestClient, sql):
        admin_client.put(f'{ADMIN_CONTENT}/faq', json={
            'title': 'FAQ', 'content_data': [{'q': 'When?', 'a': 'March'}],
        })
        sections = [c['section'] for c in admin_client.get(ADMIN_CONTENT).json()]
        assert 'faq' in sections
        assert len(sql("SELECT * FROM site_content WHERE section = 'faq'")) == 1


class TestCatalog:
    def test_create_goes_to_the_end(self, admin_client: TestClient):
        response = admin_client.post(ADMIN_PACKAGES, json=NEW_PACKAGE)
        assert response.status_code == 200
        created = response.json()
        assert created['name'] == 'Student Pass'
        assert created['features'] == ['Certificate of Participation']
        assert created['is_active'] is True
        # three seeded packages before it
        assert created['display_order'] == 4

        names = [p['name'] for p in admin_client.get(PACKAGES).json()]
        assert names[-1] == 'Student Pass'

    def test_soft_delete_hides_but_keeps_row(self, admin_client: TestClient, sql):
        package_id = admin_client.post(ADMIN_PACKAGES, json=NEW_PACKAGE).json()['id']

        response = admin_client.delete(f'{ADMIN_PACKAGES}/{package_id}')
        assert response.status_code == 200

        assert package_id not in [p['id'] for p in admin_client.get(PACKAGES).json()]
        rows = sql('SELECT is_active FROM event_packages WHERE id = :id', {'id': package_id})
        assert len(rows) == 1
        assert not rows[0]['is_active']

    def test_deleted_rows_still_count_for_next_position(self, admin_client: TestClient):
        first = admin_client.post(ADMIN_SPEAKERS, json=NEW_SPEAKER).json()
        admin_client.delete(f"{ADMIN_SPEAKERS}/{first['id']}")
        second = admin_client.post(ADMIN_SPEAKERS, json=NEW_SPEAKER).json()
        assert second['display_order'] == first['display_order'] + 1

    def test_ties_are_broken_by_id(self, admin_client: TestClient):
        speakers = admin_client.get(SPEAKERS).json()
        for s in speakers:
            response = admin_client.put(
                f"{ADMIN_SPEAKERS}/{s['id']}/order", json={'display_order': 1}
            )
            assert response.status_code == 200

        listed = [s['id'] for s in admin_client.get(SPEAKERS).json()]
        assert listed == sorted(listed)

    def test_reorder(self, admin_client: TestClient):
        packages = admin_client.get(PACKAGES).json()
        last = packages[-1]
        admin_client.put(f"{ADMIN_PACKAGES}/{last['id']}/order", json={'display_order': 0})
        assert admin_client.get(PACKAGES).json()[0]['id'] == last['id']

    def test_update(self, admin_client: TestClient):
        speaker_id = admin_client.get(SPEAKERS).json()[0]['id']
        response = admin_client.put(
            f'{ADMIN_SPEAKERS}/{speaker_id}', json={**NEW_SPEAKER, 'name': 'Renamed'}
        )
        assert response.status_code == 200
        assert admin_client.get(SPEAKERS).json()[0]['name'] == 'Renamed'

    def test_update_missing_row(self, admin_client: TestClient):
        response = admin_client.put(f'{ADMIN_PACKAGES}/9999', json=NEW_PACKAGE)
        assert response.status_code == 404
        assert response.json()['error'] == 'Package not found'

    def test_delete_missing_row(self, admin_client: TestClient):
        assert admin_client.delete(f'{ADMIN_SPEAKERS}/9999').status_code == 404

    def test_admin_list_matches_public(self, admin_client: TestClient):
        assert admin_client.get(ADMIN_PACKAGES).json() == admin_client.get(PACKAGES).json()

    def test_requires_admin(self, client: TestClient):
        assert client.post(ADMIN_PACKAGES, json=NEW_PACKAGE).status_code == 401
        assert client.delete(f'{ADMIN_SPEAKERS}/1').status_code == 401


class TestContactForms:
    def test_submit_and_list(self, admin_client: TestClient):
        response = admin_client.post(CONTACT, json=CONTACT_BODY)
        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['message'] == 'Contact form submitted successfully'

        forms = admin_client.get(ADMIN_CONTACT_FORMS).json()
        assert [f['id'] for f in forms] == [data['id']]
        assert forms[0]['message'] == CONTACT_BODY['message']

    def test_short_message_is_rejected(self, client: TestClient, sql):
        response = client.post(CONTACT, json={**CONTACT_BODY, 'message': 'hi'})
        assert response.status_code == 400
        assert response.json()['details'][0]['field'] == 'message'
        assert sql('SELECT * FROM contact_forms') == []

    def test_export(self, admin_client: TestClient):
        admin_client.post(CONTACT, json=CONTACT_BODY)
        response = admin_client.get(ADMIN_CONTACT_FORMS_EXPORT)
        assert response.status_code == 200
        assert response.headers['content-disposition'] == (
            'attachment; filename=contact_forms_export.json'
        )
        (row,) = response.json()
        assert set(row) == {'id', 'name', 'phone', 'email', 'message', 'submitted_at'}
        assert re.fullmatch(r'\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}', row['submitted_at'])

    def test_delete(self, admin_client: TestClient):
        form_id = admin_client.post(CONTACT, json=CONTACT_BODY).json()['id']
        assert admin_client.delete(f'{ADMIN_CONTACT_FORMS}/{form_id}').status_code == 200
        assert admin_client.get(ADMIN_CONTACT_FORMS).json() == []
        assert admin_client.delete(f'{ADMIN_CONTACT_FORMS}/{form_id}').status_code == 404


class TestContactInfo:
    def test_update(self, admin_client: TestClient):
        body = {
            'phone_numbers': ['+91 90000 00000'],
            'email': 'hello@rtalks.com',
            'location': {'city': 'Chennai'},
        }
        assert admin_client.put(ADMIN_CONTACT_INFO, json=body).status_code == 200
        assert admin_client.get(CONTACT_INFO).json() == body
        assert admin_client.get(ADMIN_CONTACT_INFO).json() == body
