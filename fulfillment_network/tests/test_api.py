"""
Tests for the Flask API through its test client.
"""
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from db_test_case import SqliteTestCase
from fulfillment_network.api import create_app


class TestWarehouseApi(SqliteTestCase):

    def setUp(self):
        self.app = create_app('sqlite://', create_tables=True)
        self.app.config['TESTING'] = True
        self.client = self.app.test_client()

    def create(self, code, location="AMSTERDAM-001", capacity=30, stock=10):
        return self.client.post('/warehouse/', json={
            'business_unit_code': code,
            'location': location,
            'capacity': capacity,
            'stock': stock
        })

    def test_create_and_get(self):
        response = self.create("MWH.001")

        self.assertEqual(response.status_code, 201)
        warehouse = response.get_json()['warehouse']
        self.assertEqual(warehouse['business_unit_code'], "MWH.001")
        self.assertEqual(warehouse['status'], "ACTIVE")

        response = self.client.get(f"/warehouse/{warehouse['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['warehouse']['location'], "AMSTERDAM-001")

    def test_create_invalid_location(self):
        response = self.create("MWH.001", location="NOWHERE-001")

        self.assertEqual(response.status_code, 404)
        body = response.get_json()
        self.assertFalse(body['success'])
        self.assertEqual(body['code'], 'LOCATION_NOT_FOUND')
        self.assertIn("is not valid", body['message'])

    def test_create_duplicate(self):
        self.create("MWH.001")

        response = self.create("MWH.001")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'DUPLICATE_RESOURCE')

    def test_create_with_bad_body(self):
        response = self.client.post('/warehouse/', json={'business_unit_code': "MWH.001", 'capacity': "big"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'INVALID_INPUT')

    def test_create_with_negative_capacity(self):
        response = self.create("MWH.001", capacity=-50, stock=0)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'INVALID_INPUT')
        self.assertEqual(self.client.get('/warehouse/').get_json()['count'], 0)

    def test_archive_and_list(self):
        warehouse_id = self.create("MWH.001").get_json()['warehouse']['id']
        self.create("MWH.002")

        response = self.client.delete(f"/warehouse/{warehouse_id}")
        self.assertEqual(response.status_code, 204)

        active = self.client.get('/warehouse/').get_json()
        self.assertEqual([w['business_unit_code'] for w in active['warehouses']], ["MWH.002"])

        everything = self.client.get('/warehouse/?include_archived=true').get_json()
        self.assertEqual(everything['count'], 2)

    def test_archive_unknown(self):
        response = self.client.delete('/warehouse/404')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['message'], "Warehouse with id 404 not found")

    def test_replace(self):
        self.create("MWH.001", capacity=30, stock=10)

        response = self.client.post('/warehouse/MWH.001/replacement', json={
            'location': "ZWOLLE-002",
            'capacity': 40,
            'stock': 10
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['warehouse']['location'], "ZWOLLE-002")

    def test_replace_stock_mismatch(self):
        self.create("MWH.001", capacity=30, stock=10)

        response = self.client.post('/warehouse/MWH.001/replacement', json={
            'location': "AMSTERDAM-001",
            'capacity': 40,
            'stock': 12
        })

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'STOCK_MISMATCH')


class TestFulfillmentApi(SqliteTestCase):

    def setUp(self):
        self.app = create_app('sqlite://', create_tables=True)
        self.app.config['TESTING'] = True
        self.client = self.app.test_client()

        self.product_id = self.add_product("Widget")
        self.store_id = self.add_store("Store A")
        self.client.post('/warehouse/', json={
            'business_unit_code': "MWH.001", 'location': "AMSTERDAM-001", 'capacity': 30, 'stock': 0
        })

    def body(self, warehouse="MWH.001", product_id=None, store_id=None):
        return {
            'product_id': product_id or self.product_id,
            'warehouse_business_unit': warehouse,
            'store_id': store_id or self.store_id
        }

    def test_create_list_and_delete(self):
        response = self.client.post('/api/fulfillment/', json=self.body())

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['fulfillment']['product_name'], "Widget")
        self.assertIn(f"/store/{self.store_id}", response.headers['Location'])

        listing = self.client.get(f'/api/fulfillment/store/{self.store_id}').get_json()
        self.assertEqual(listing['count'], 1)
        self.assertEqual(self.client.get('/api/fulfillment/warehouse/MWH.001').get_json()['count'], 1)
        self.assertEqual(self.client.get(f'/api/fulfillment/product/{self.product_id}').get_json()['count'], 1)

        response = self.client.delete('/api/fulfillment/', json=self.body())
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get('/api/fulfillment/').get_json()['count'], 0)

    def test_duplicate(self):
        self.client.post('/api/fulfillment/', json=self.body())

        response = self.client.post('/api/fulfillment/', json=self.body())

        self.assertEqual(response.status_code, 400)
        self.assertIn("already exists", response.get_json()['message'])

    def test_missing_entities(self):
        response = self.client.post('/api/fulfillment/', json=self.body("MWH.404", 999, 888))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(len(response.get_json()['details']['violations']), 3)

    def test_delete_missing(self):
        response = self.client.delete('/api/fulfillment/', json=self.body())

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['code'], 'FULFILLMENT_NOT_FOUND')

    def test_invalid_body(self):
        response = self.client.post('/api/fulfillment/', data="not json", content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'INVALID_INPUT')

    def test_stats(self):
        self.client.post('/api/fulfillment/', json=self.body())

        store_stats = self.client.get(f'/api/fulfillment/store/{self.store_id}/stats').get_json()['stats']
        self.assertEqual(store_stats['entity_type'], 'Store')
        self.assertEqual(store_stats['current_count'], 1)
        self.assertEqual(store_stats['max_allowed'], 3)
        self.assertTrue(store_stats['can_add_more'])

        warehouse_stats = self.client.get('/api/fulfillment/warehouse/MWH.001/stats').get_json()['stats']
        self.assertEqual(warehouse_stats['max_allowed'], 5)

        product_stats = self.client.get(f'/api/fulfillment/product/{self.product_id}/stats').get_json()['stats']
        self.assertEqual(product_stats['additional_count'], 1)

        pair = f'/api/fulfillment/product/{self.product_id}/store/{self.store_id}'
        self.assertEqual(self.client.get(pair).get_json()['count'], 1)
        pair_stats = self.client.get(f'{pair}/stats').get_json()['stats']
        self.assertEqual(pair_stats['entity_type'], 'ProductInStore')
        self.assertEqual(pair_stats['max_allowed'], 2)


if __name__ == '__main__':
    unittest.main()
