"""Tests for the vote and comment endpoints and form posts."""

import unittest
from unittest.mock import patch

from common.cms import CMSError, Comment, User, Vote
from common.cms.votes import VoteChange
from inkwell.blueprints.votes import vote_summary
from inkwell.server import create_app

USER = User(id=7, username="alice")
VOTES = [Vote(id=1, value=1, user_id=7), Vote(id=2, value=1, user_id=8), Vote(id=3, value=-1, user_id=9)]


class RouteTestCase(unittest.TestCase):

    def setUp(self):
        self.app = create_app(testing=True)
        self.client = self.app.test_client()

    def login(self, user=USER):
        self.client.set_cookie('auth-token', 'tok')
        patcher = patch('inkwell.decorators.auth.fetch_current_user', return_value=user)
        patcher.start()
        self.addCleanup(patcher.stop)

    def flashes(self):
        with self.client.session_transaction() as session:
            return [message for _, message in session.get('_flashes', [])]


class VoteRoutesTests(RouteTestCase):

    @patch('inkwell.blueprints.votes.get_votes_by_blog', return_value=VOTES)
    def test_vote_summary(self, mock_votes):
        self.assertEqual(vote_summary(1), (1, None))
        self.assertEqual(vote_summary(1, USER), (1, 1))
        self.assertEqual(vote_summary(1, User(id=9, username="c")), (1, -1))

    @patch('inkwell.blueprints.votes.get_votes_by_blog', return_value=VOTES)
    def test_get_votes_anonymous(self, mock_votes):
        response = self.client.get('/api/blogs/1/votes')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'score': 1, 'userVote': None})
        mock_votes.assert_called_once_with(1)

    @patch('inkwell.blueprints.votes.get_votes_by_blog', return_value=VOTES)
    def test_get_votes_with_user(self, mock_votes):
        self.login()
        response = self.client.get('/api/blogs/1/votes')
        self.assertEqual(response.get_json(), {'score': 1, 'userVote': 1})

    @patch('inkwell.blueprints.votes.get_votes_by_blog', side_effect=CMSError("down"))
    def test_get_votes_cms_failure(self, mock_votes):
        response = self.client.get('/api/blogs/1/votes')
        self.assertEqual(response.status_code, 502)

    def test_vote_requires_login(self):
        response = self.client.post('/api/blogs/1/vote', json={'value': 1})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['code'], 'UNAUTHORIZED')

    @patch('inkwell.blueprints.votes.apply_vote')
    @patch('inkwell.blueprints.votes.get_votes_by_blog', return_value=VOTES)
    def test_vote_flip(self, mock_votes, mock_apply):
        self.login()
        mock_apply.return_value = (VoteChange("update", -1, -2), Vote(id=1, value=-1))

        response = self.client.post('/api/blogs/1/vote', json={'value': -1})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'score': -1, 'userVote': -1, 'action': 'update'})
        mock_apply.assert_called_once_with(1, USER, -1, 'tok')

    @patch('inkwell.blueprints.votes.apply_vote')
    @patch('inkwell.blueprints.votes.get_votes_by_blog', return_value=VOTES)
    def test_vote_withdraw(self, mock_votes, mock_apply):
        self.login()
        mock_apply.return_value = (VoteChange("remove", None, -1), None)
        response = self.client.post('/api/blogs/1/vote', json={'value': 1})
        self.assertEqual(response.get_json(), {'score': 0, 'userVote': None, 'action': 'remove'})

    def test_vote_rejects_bad_value(self):
        self.login()
        for value in (0, 2, 'up', None):
            response = self.client.post('/api/blogs/1/vote', json={'value': value})
            self.assertEqual(response.status_code, 400)

    @patch('inkwell.blueprints.votes.apply_vote', side_effect=CMSError("forbidden", 403))
    @patch('inkwell.blueprints.votes.get_votes_by_blog', return_value=[])
    def test_vote_cms_failure(self, mock_votes, mock_apply):
        self.login()
        response = self.client.post('/api/blogs/1/vote', json={'value': 1})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.get_json(), {'error': 'Failed to vote'})

    def test_vote_form_anonymous(self):
        response = self.client.post('/blogs/1/vote', data={'value': '1', 'next': '/blogs/hello'})
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers['Location'], '/blogs/hello')
        self.assertEqual(self.flashes(), ['Login to vote'])

    @patch('inkwell.blueprints.votes.apply_vote')
    def test_vote_form(self, mock_apply):
        self.login()
        mock_apply.return_value = (VoteChange("create", 1, 1), Vote(id=5, value=1))
        response = self.client.post('/blogs/1/vote', data={'value': '1', 'next': '/blogs/hello'})
        self.assertEqual(response.headers['Location'], '/blogs/hello')
        mock_apply.assert_called_once_with(1, USER, 1, 'tok')
        self.assertEqual(self.flashes(), [])

    @patch('inkwell.blueprints.votes.apply_vote', side_effect=CMSError("down"))
    def test_vote_form_failure(self, mock_apply):
        self.login()
        response = self.client.post('/blogs/1/vote', data={'value': '-1', 'next': '/blogs/hello'})
        self.assertEqual(response.headers['Location'], '/blogs/hello')
        self.assertEqual(self.flashes(), ['Failed to vote'])


class CommentRoutesTests(RouteTestCase):

    @patch('inkwell.blueprints.comments.get_comments_by_blog')
    def test_list_comments(self, mock_comments):
        mock_comments.return_value = [
            Comment(id=3, content="Great read", user=User(id=8, username="bob"),
                    created_at="2024-01-02T00:00:00.000Z"),
        ]
        response = self.client.get('/api/blogs/1/comments')
        self.assertEqual(response.status_code, 200)
        comments = response.get_json()['comments']
        self.assertEqual(len(comments), 1)
        self.assertEqual(comments[0]['content'], 'Great read')
        self.assertEqual(comments[0]['user'], {'id': 8, 'username': 'bob'})
        mock_comments.assert_called_once_with(1, None)

    def test_post_comment_requires_login(self):
        response = self.client.post('/api/blogs/1/comments', json={'content': 'Hi'})
        self.assertEqual(response.status_code, 401)

    @patch('inkwell.blueprints.comments.post_comment', return_value={'id': 11})
    def test_post_comment(self, mock_post):
        self.login()
        response = self.client.post('/api/blogs/1/comments', json={'content': 'Hi'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json(), {'message': 'Your comment is awaiting moderation'})
        mock_post.assert_called_once_with(1, 'Hi', 'tok')

    @patch('inkwell.blueprints.comments.post_comment', side_effect=ValueError("Comment content is required"))
    def test_post_blank_comment(self, mock_post):
        self.login()
        response = self.client.post('/api/blogs/1/comments', json={'content': '  '})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json(), {'error': 'Comment content is required'})

    @patch('inkwell.blueprints.comments.post_comment', side_effect=CMSError("down", 500))
    def test_post_comment_cms_failure(self, mock_post):
        self.login()
        response = self.client.post('/api/blogs/1/comments', json={'content': 'Hi'})
        self.assertEqual(response.status_code, 502)

    def test_comment_form_anonymous(self):
        response = self.client.post('/blogs/1/comments', data={'content': 'Hi', 'next': '/blogs/hello'})
        self.assertEqual(response.headers['Location'], '/blogs/hello')
        self.assertEqual(self.flashes(), ['Login to comment'])

    @patch('inkwell.blueprints.comments.post_comment', return_value={})
    def test_comment_form(self, mock_post):
        self.login()
        response = self.client.post('/blogs/1/comments', data={'content': 'Hi', 'next': '/blogs/hello'})
        self.assertEqual(response.headers['Location'], '/blogs/hello')
        self.assertEqual(self.flashes(), ['Your comment is awaiting moderation'])

    def test_comment_form_blank(self):
        self.login()
        response = self.client.post('/blogs/1/comments', data={'content': '   ', 'next': '/blogs/hello'})
        self.assertEqual(response.headers['Location'], '/blogs/hello')
        self.assertEqual(self.flashes(), ['Comment cannot be empty'])

    @patch('inkwell.blueprints.comments.post_comment', side_effect=CMSError("down"))
    def test_comment_form_failure(self, mock_post):
        self.login()
        self.client.post('/blogs/1/comments', data={'content': 'Hi', 'next': '//evil.example.com'})
        self.assertEqual(self.flashes(), ['Failed to post comment'])


if __name__ == '__main__':
    unittest.main()
