"""Tests for the per-request access log."""

import json
import os
import shutil
import tempfile
import unittest

from flask import Flask, jsonify

from common.base.request_logger import RequestLogger


class RequestLoggerTests(unittest.TestCase):

    def setUp(self):
        self.log_dir = tempfile.mkdtemp()
        self.app = Flask(__name__)
        self.logger = RequestLogger(self.app, log_dir=self.log_dir)

        @self.app.route('/login', methods=['POST'])
        def login():
            return jsonify({'ok': True})

        self.client = self.app.test_client()

    def tearDown(self):
        shutil.rmtree(self.log_dir, ignore_errors=True)

    def read_log(self, name):
        with open(os.path.join(self.log_dir, name)) as f:
            return [json.loads(line.split(' - ', 2)[2]) for line in f if line.strip()]

    def test_sanitize_drops_credentials(self):
        params = {'identifier': 'alice', 'Password': 'secret', 'redirect': '/write'}
        self.assertEqual(self.logger.sanitize(params), {'redirect': '/write'})
        self.assertEqual(self.logger.sanitize(None), {})

    def test_request_is_logged_without_credentials(self):
        self.client.post('/login?redirect=/write', data={'identifier': 'alice', 'password': 'secret'})

        info = self.read_log('requests.log')[-1]
        self.assertEqual(info['method'], 'POST')
        self.assertEqual(info['path'], '/login')
        self.assertEqual(info['status_code'], 200)

        debug = self.read_log('requests.debug.log')[-1]
        self.assertEqual(debug['user'], 'anonymous')
        self.assertEqual(debug['query_params'], {'redirect': '/write'})
        self.assertNotIn('request_body', debug)
        self.assertNotIn('secret', json.dumps(debug))


if __name__ == '__main__':
    unittest.main()
