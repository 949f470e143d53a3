"""Blueprint for the post editor and its live preview."""

from flask import Blueprint, request, render_template, redirect, jsonify, g, flash
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from common.cms import CMSError, UserBlogPostData, create_post, get_all_categories, upload_image
from common.formatting import slugify
from inkwell.blueprints.metrics import record_cms_error
from inkwell.decorators import require_editor
from richtext import markdown_to_blocks, render_blocks

logger = get_logger(__name__)

write_bp = Blueprint('write', __name__)


def _load_categories():
    """Categories for the form; the editor still works without them."""
    try:
        return get_all_categories()
    except CMSError as e:
        logger.warning(f"Could not load categories for editor: {e}")
        return []


@write_bp.route('/write', methods=['GET'])
@require_editor
def show_write_form() -> ResponseReturnValue:
    """
    Display the post editor.

    :return: Rendered editor template
    """
    return render_template('write.html', categories=_load_categories(), form={})


@write_bp.route('/write', methods=['POST'])
@require_editor
def handle_write() -> ResponseReturnValue:
    """
    Create a post from the editor form, then attach the optional cover.

    :return: Redirect to the new post, or the form with an error
    """
    form = {
        'title': request.form.get('title', '').strip(),
        'description': request.form.get('description', '').strip(),
        'content': request.form.get('content', ''),
        'categories': request.form.getlist('categories'),
    }

    if not form['title'] and not form['description']:
        return render_template('write.html', categories=_load_categories(), form=form,
                               error='A title or description is required.'), 400

    post_data = UserBlogPostData(
        title=form['title'],
        slug=slugify(form['title']),
        description=form['description'],
        content=form['content'],
        categories=[c for c in form['categories'] if c],
    )

    try:
        created = create_post(post_data, g.token)
    except CMSError as e:
        record_cms_error(e.status)
        return render_template('write.html', categories=_load_categories(), form=form,
                               error='Failed to create post. Please try again.'), 502

    cover = request.files.get('cover')
    if cover and cover.filename and created.get('id') is not None:
        try:
            upload_image(cover.stream, created['id'], g.token,
                         filename=cover.filename, mimetype=cover.mimetype)
        except CMSError as e:
            logger.error(f"Post {created.get('id')} created without cover: {e}")
            flash('Post created, but the cover image could not be uploaded', 'error')

    route_param = created.get('documentId') or created.get('slug') or created.get('id')
    flash('Post created successfully', 'success')
    return redirect(f"/blogs/{route_param}")


@write_bp.route('/api/preview', methods=['POST'])
@require_editor
def preview_post() -> ResponseReturnValue:
    """
    Render editor Markdown the way the post page will show it.

    Expects JSON input with a 'content' field.

    :return: JSON ``{html, blocks}``
    """
    data = request.get_json(silent=True)
    if not data or 'content' not in data:
        return jsonify({'error': 'Content required'}), 400

    blocks = markdown_to_blocks(str(data['content']))
    return jsonify({'html': render_blocks(blocks), 'blocks': blocks})
