#!/usr/bin/python3

"""Diagnostics for the CMS this frontend talks to.

  check_cms.py endpoints        # probe the content endpoints the site uses
  check_cms.py token <jwt>      # check a user token against users/me
"""

import argparse
import datetime
import os
import sys
from typing import Any, List, NamedTuple, Optional

import requests

# Add project root to Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.join(project_root, 'src'))

import constants
from common.cms import CMSClient, CMSError, decode_token_claims, token_expired
from common.cms.auth import ME_PATH
from common.cms.normalize import flatten, normalize_user
from common.config.site_config import init_site_manager

# Hints for common failures, keyed by probe name
NOT_FOUND_HINTS = {
    'comments': 'Comments content type might not exist in the CMS',
    'votes': 'Votes content type might not exist in the CMS',
}


class ProbeResult(NamedTuple):
    name: str
    ok: bool
    status: Any
    body: Any = None
    error: Optional[str] = None


def probe(client: CMSClient, name: str, path: str, token: Optional[str] = None) -> ProbeResult:
    """GET a path and report the outcome instead of raising."""
    print(f"Testing {name}: GET /{path}")
    try:
        body = client.get(path, token=token)
    except CMSError as e:
        status = e.status if e.status is not None else 'NETWORK_ERROR'
        print(f"   FAILED - Status: {status}: {e.message}")
        hint = NOT_FOUND_HINTS.get(name)
        if e.status == 404 and hint:
            print(f"   Hint: {hint}")
        return ProbeResult(name, False, status, error=e.message)
    print("   OK")
    return ProbeResult(name, True, 200, body)


def _records(body: Any) -> List[dict]:
    if isinstance(body, dict) and isinstance(body.get('data'), list):
        return [flatten(r) for r in body['data']]
    return []


def check_endpoints(client: CMSClient) -> int:
    """
    Probe the endpoints the site depends on and print a summary.

    :return: Process exit code, 0 when every probe succeeded
    """
    print(f"Base URL: {client.base_url}\n")

    # Any HTTP answer means the server is up; only transport failures count
    try:
        client.session.get(client.url('api'), timeout=client.timeout)
    except requests.RequestException as e:
        print(f"Cannot connect to CMS: {e}")
        print(f"Make sure the CMS is running on {client.base_url}")
        return 1
    print("CMS server is running\n")

    results = []
    blogs = probe(client, 'blogs', 'api/blogs?populate=*&pagination[pageSize]=1')
    results.append(blogs)

    records = _records(blogs.body) if blogs.ok else []
    if blogs.ok:
        total = ((blogs.body or {}).get('meta') or {}).get('pagination', {}).get('total', 0)
        print(f"   Found {total} blogs")

    if records:
        blog = records[0]
        print(f"   Sample blog ID: {blog.get('id')}, Title: {blog.get('title') or 'N/A'}")

        slug = blog.get('slug') or blog.get('documentId')
        if slug:
            results.append(probe(client, 'blog by slug', f"api/blogs?filters[slug][$eq]={slug}&populate=*"))
        if blog.get('documentId'):
            results.append(probe(
                client, 'blog by documentId',
                f"api/blogs?filters[documentId][$eq]={blog['documentId']}&populate=*"))

    results.append(probe(client, 'categories', 'api/categories'))

    if records:
        blog_id = records[0].get('id')
        results.append(probe(
            client, 'comments',
            f"api/comments?filters[blog][id][$eq]={blog_id}&filters[isApproved][$eq]=true"))
        results.append(probe(client, 'votes', f"api/votes?filters[blog][id][$eq]={blog_id}"))

    failed = [r for r in results if not r.ok]
    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    print(f"Successful: {len(results) - len(failed)}/{len(results)}")
    print(f"Failed: {len(failed)}/{len(results)}")
    for index, result in enumerate(results, start=1):
        print(f"{index}. {'OK  ' if result.ok else 'FAIL'} {result.name} - Status: {result.status}")

    print("\nRecommendations:")
    if failed:
        print("   - Check the CMS admin panel for content type permissions")
        print("   - Ensure all content types exist (Blog, Category, Comment, Vote)")
        print("   - Verify CORS settings in the CMS config")
        print("   - Check the CMS server logs for errors")
        return 1
    print("   - All endpoints are working correctly")
    return 0


def check_token(client: CMSClient, token: str) -> int:
    """
    Check a JWT against users/me and print its decoded claims.

    :return: Process exit code, 0 when the CMS accepts the token
    """
    print(f"CMS URL: {client.base_url}")
    print(f"Token preview: {token[:20]}...\n")

    ok = True
    print(f"GET /{ME_PATH}")
    try:
        user = normalize_user(client.get(ME_PATH, token=token) or {})
        print("   User authenticated")
        print(f"   User ID: {user.id}")
        print(f"   Username: {user.username}")
        print(f"   Role: {user.role.get('type') or 'N/A'}")
    except CMSError as e:
        ok = False
        print(f"   FAILED - Status: {e.status}: {e.message}")
        if e.status == 401:
            print("   Hint: token is invalid or expired")
        elif e.status == 403:
            print("   Hint: token is valid but the Authenticated role lacks the users/me permission")

    claims = decode_token_claims(token)
    print("\nToken claims:")
    if claims is None:
        print("   Could not decode token")
        return 1

    for key in ('id', 'iat', 'exp'):
        if key in claims:
            value = claims[key]
            if key in ('iat', 'exp'):
                stamp = datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc).isoformat()
                value = f"{value} ({stamp})"
            print(f"   {key}: {value}")

    if token_expired(claims):
        print("   Token has EXPIRED")
        ok = False
    elif 'exp' in claims:
        print("   Token has not expired")

    return 0 if ok else 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Check the CMS used by Inkwell')
    parser.add_argument('--cms-url', help='CMS base URL (default: from config/site.toml or CMS_URL)')
    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('endpoints', help='Probe the content endpoints')
    token_parser = subparsers.add_parser('token', help='Check a user JWT')
    token_parser.add_argument('token', nargs='?', default=os.getenv('TOKEN'),
                              help='JWT to check (default: $TOKEN)')
    args = parser.parse_args(argv)

    constants.init_production()
    config = init_site_manager().config
    client = CMSClient(args.cms_url or config.cms_url, timeout=config.request_timeout)

    if args.command == 'endpoints':
        return check_endpoints(client)

    if not args.token:
        parser.error('No token provided; pass it as an argument or set TOKEN')
    return check_token(client, args.token)


if __name__ == '__main__':
    sys.exit(main())
