"""
Streamlit UI for Moviary.
Three pages: the watched-films grid with filters and search, a page to find
and add films, and a page to edit, delete and export records.

Run UI:                streamlit run streamlit_app.py
Run API (optional):    uvicorn api:app --reload
"""

# In-memory buffers and temp files for export/import
import io  # export buffers
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives

# Local modules
from moviary.app_context import AppContext, build_context  # store/client/cache wiring
from moviary.bulk_import import BulkImporter  # sequential import job
from moviary.data_loader import DataLoader  # import file parsing
from moviary.exporter import export_csv, export_jsonl  # export formats
from moviary.filters import release_year  # year labels
from moviary.models import FilmRecord, UpdateOutcome  # data classes
from moviary.search_session import MetadataSearchSession  # generation-guarded search
from moviary.tmdb_client import MetadataClient  # image URLs

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Moviary", layout="wide")  # wide layout

# Main page title
st.title("🎬 Moviary")  # friendly header


def get_context() -> AppContext:
	"""One context per browser session; the localization cache lives as long as it does."""
	if 'ctx' not in st.session_state:
		ctx = build_context()
		result = ctx.library.reload()
		if not result.ok:
			st.error(result.message)
		st.session_state['ctx'] = ctx
	return st.session_state['ctx']


def format_runtime(minutes: int) -> str:
	return f"{minutes // 60}h {minutes % 60}m"


def render_details(ctx: AppContext, film: FilmRecord):
	title, poster = ctx.localization.display_fields(film)
	if film.backdrop_path:
		st.image(MetadataClient.build_image_url(film.backdrop_path, 'w1280'), width='stretch')
	c1, c2 = st.columns([1, 3])
	with c1:
		if poster:
			st.image(MetadataClient.build_image_url(poster, 'w300'), width='stretch')
	with c2:
		st.subheader(title)
		st.caption(
			f"★ {film.vote_average:.1f} | {format_runtime(film.runtime_minutes)} | "
			f"{', '.join(film.origin_countries)} | {release_year(film) or ''}"
		)
		st.write(' · '.join(film.genres))
		st.markdown("**Synopsis**")
		st.write(film.overview)
		if film.trailer_key:
			st.video(f"https://www.youtube.com/watch?v={film.trailer_key}")


def page_collection(ctx: AppContext):
	view = ctx.view
	st.header("Watched Movies")
	total = len(view.collection)
	st.caption(f"{total} film{'s' if total != 1 else ''} watched")

	facets = view.facets
	criteria = view.criteria
	c1, c2, c3, c4, c5 = st.columns([2, 2, 2, 3, 1])
	with c1:
		genre = st.selectbox("Genre", facets.genres, index=_index(facets.genres, criteria.genre))
	with c2:
		year = st.selectbox("Year", facets.years, index=_index(facets.years, criteria.year))
	with c3:
		country = st.selectbox("Country", facets.countries, index=_index(facets.countries, criteria.country))
	with c4:
		term = st.text_input("Search your films...", value=criteria.search_term)
	with c5:
		st.write("")
		if st.button("Clear filters"):
			view.clear()
			st.rerun()

	view.set_criteria(genre=genre, year=year, country=country)
	view.search(term)

	films = view.visible
	if not films:
		st.info("No films match the current filters.")
	cols = st.columns(4)
	for i, film in enumerate(films):
		title, poster = ctx.localization.display_fields(film)
		with cols[i % 4]:
			if poster:
				st.image(MetadataClient.build_image_url(poster), width='stretch')
			st.markdown(f"**{title}**")
			st.caption(f"★ {film.vote_average:.1f} · {release_year(film) or ''}")
			extra = len(film.genres) - 2
			st.caption(', '.join(film.genres[:2]) + (f" +{extra}" if extra > 0 else ''))
			with st.expander("View details"):
				render_details(ctx, film)


def page_add(ctx: AppContext):
	st.header("Add Films to Your Collection")

	if 'search_session' not in st.session_state:
		def on_results(query, hits):
			st.session_state['search_hits'] = hits

		def on_error(query, error):
			st.session_state['search_error'] = "Search failed. Please try again."

		st.session_state['search_session'] = MetadataSearchSession(
			ctx.client, on_results, on_error, debounce_seconds=ctx.settings.search_debounce_seconds,
		)
	session: MetadataSearchSession = st.session_state['search_session']

	query = st.text_input("Search for a film to add...")
	if query != st.session_state.get('last_query'):
		st.session_state['last_query'] = query
		st.session_state.pop('search_error', None)
		if query.strip():
			session.search_now(query)
		else:
			st.session_state['search_hits'] = []

	if st.session_state.get('search_error'):
		st.error(st.session_state['search_error'])

	hits = st.session_state.get('search_hits', [])
	for hit in hits:
		c1, c2, c3 = st.columns([1, 5, 2])
		with c1:
			if hit.poster_path:
				st.image(MetadataClient.build_image_url(hit.poster_path, 'w92'))
		with c2:
			st.markdown(f"**{hit.title}**")
			st.caption(f"{(hit.release_date or '')[:4]} · ★ {hit.vote_average:.1f}")
		with c3:
			if st.button("Add to Collection", key=f"add-{hit.external_id}"):
				with st.spinner("Adding..."):
					result = ctx.library.add_from_search(hit)
				if result.ok:
					st.success(result.message)
				elif result.notice:
					st.warning(result.message)
				else:
					st.error(result.message)

	if query and not hits and not st.session_state.get('search_error'):
		st.caption(f'No films found for "{query}". Try a different search term.')

	st.divider()
	st.subheader("Bulk import")
	upload = st.file_uploader("Titles file (.jsonl, .csv or one title per line)", type=['jsonl', 'csv', 'txt'])
	if upload is not None and st.button("Import"):
		items = DataLoader().load_uploaded_titles(upload.getvalue(), upload.name)
		with st.spinner(f"Importing {len(items)} titles..."):
			report = BulkImporter(ctx.library, delay_seconds=ctx.settings.import_delay_seconds).run(items)
		st.success(f"{report.added} added, {report.skipped} skipped, {report.failed} failed")
		st.dataframe(report.details)


def page_manage(ctx: AppContext):
	st.header("Export / Manage Films")
	films = ctx.view.collection

	buf_jsonl, buf_csv = io.StringIO(), io.StringIO()
	export_jsonl(films, buf_jsonl)
	export_csv(films, buf_csv)
	c1, c2 = st.columns(2)
	with c1:
		st.download_button("Download JSONL", buf_jsonl.getvalue(), file_name="films.jsonl")
	with c2:
		st.download_button("Download CSV", buf_csv.getvalue(), file_name="films.csv")

	if not films:
		st.info("No films found.")
	for film in films:
		with st.expander(f"{film.title} ({release_year(film) or ''})"):
			st.caption(f"Genres: {', '.join(film.genres)}")
			st.caption(f"Storage: {', '.join(film.storage_locations or []) or '-'}")
			with st.form(key=f"edit-{film.id}"):
				form = {
					'tmdb_id': st.text_input("TMDB ID", str(film.external_id)),
					'title': st.text_input("Title", film.title),
					'poster_path': st.text_input("Poster path", film.poster_path),
					'backdrop_path': st.text_input("Backdrop path", film.backdrop_path),
					'overview': st.text_area("Overview", film.overview),
					'release_date': st.text_input("Release date", film.release_date),
					'vote_average': st.text_input("Vote average", str(film.vote_average)),
					'runtime': st.text_input("Runtime (min)", str(film.runtime_minutes)),
					'trailer_key': st.text_input("Trailer key", film.trailer_key),
					'genres': st.text_input("Genres (comma separated)", ', '.join(film.genres)),
					'origin_country': st.text_input("Origin countries (comma separated)", ', '.join(film.origin_countries)),
					'storage_locations': st.text_input("Storage locations (comma separated)", ', '.join(film.storage_locations or [])),
				}
				if st.form_submit_button("Save"):
					result = ctx.library.save_edit(film.id, form)
					if result.outcome == UpdateOutcome.PARTIAL:
						st.warning(result.message)
					elif result.ok:
						st.success(result.message)
					else:
						st.error(result.message)

			confirm = st.checkbox("Yes, delete this film. This action cannot be undone.", key=f"confirm-{film.id}")
			if st.button("Delete", key=f"delete-{film.id}"):
				result = ctx.library.delete_film(film.id, confirmed=confirm)
				if result.ok:
					st.rerun()
				elif result.notice:
					st.warning(result.message)
				else:
					st.error(result.message)


def _index(options, value) -> int:
	return options.index(value) if value in options else 0


ctx = get_context()

# Persistent banner while running on the no-op store
if ctx.warning:
	st.warning(ctx.warning)

# Sidebar navigation
with st.sidebar:
	page = st.radio("Go to", ["Collection", "Add films", "Manage / Export"])

if page == "Collection":
	page_collection(ctx)
elif page == "Add films":
	page_add(ctx)
else:
	page_manage(ctx)

# Deliver deferred view notifications after this render pass
ctx.scheduler.run_pending()
