"""Streamlit UI — step-by-step pool permit application wizard."""

import asyncio

import streamlit as st

from errors import PermitWizardError, ValidationBlocked
from prompts.validation_prompts import SCREEN_MESSAGES, documents_hint
from staging.upload_reader import DOCUMENT_CATEGORIES
from validator.presenter import DOWNLOAD_FILENAME, render_application_text
from wizard.builder import build_graph
from wizard.controller import WizardController
from wizard.fields import HEATING_TYPES, POOL_TYPES, PROPERTY_TYPES, ZONING_OPTIONS
from wizard.state import FORM_STEPS
from langsmith_tracing import flow_trace, continue_flow_trace, clear_flow_trace

# ── Page config ─────────────────────────────────────────────────────────
st.set_page_config(page_title="PoolPermit", page_icon="💧", layout="centered")

FAQ_ITEMS = [
    (
        "How long does the permit application process take?",
        "Typically 2-4 weeks from submission to approval, depending on your local "
        "jurisdiction and whether the application is complete.",
    ),
    (
        "What documents do I need for my pool permit?",
        "You will need: property deed, site plan showing setbacks, and pool design "
        "drawings with specifications.",
    ),
    (
        "Are there setback requirements for pools?",
        "Yes, most jurisdictions require pools to be set back from property lines. Common "
        "requirements are 5-10 feet from property lines and 25+ feet from neighbors.",
    ),
    (
        "Do I need a fence around my pool?",
        "Most jurisdictions require residential pools to be completely enclosed with a "
        "4-6 foot fence with self-closing gates.",
    ),
    (
        "What safety features are typically required?",
        "Common requirements include: proper fencing, drain covers, emergency equipment, "
        "electrical safety, and signage.",
    ),
]

STEP_TITLES = {
    "property": "🏠 Property Information",
    "pool": "💧 Pool Specifications",
    "documents": "📄 Supporting Documents",
    "review": "📋 Review Application",
}


# ── Session state init ──────────────────────────────────────────────────
def _init_session():
    if "controller" not in st.session_state:
        controller = WizardController(build_graph())
        st.session_state.controller = controller
        asyncio.run(controller.start())

_init_session()

controller: WizardController = st.session_state.controller


def run(action, *args):
    """Run one controller action to completion, surfacing wizard errors."""
    try:
        with continue_flow_trace(controller.thread_id):
            return asyncio.run(action(*args))
    except ValidationBlocked:
        st.warning("Please complete all required fields before continuing.")
    except PermitWizardError as e:
        st.error(f"⚠️ {e}")
    return None


def _options(pairs):
    return [value for value, _ in pairs]


def _label_for(pairs):
    labels = dict(pairs)
    return lambda value: labels.get(value, value)


# ── Screens ─────────────────────────────────────────────────────────────
def render_landing():
    st.title("💧 Pool Permit Made Simple")
    st.write(
        "Navigate permit requirements with confidence. Our guided process streamlines "
        "documentation, validates completeness, and generates professional permit "
        "applications in minutes."
    )
    if st.button("Start Application", type="primary", use_container_width=True):
        with flow_trace(controller.thread_id):
            run(controller.start_application)
        st.rerun()

    st.subheader("Frequently Asked Questions")
    for question, answer in FAQ_ITEMS:
        with st.expander(question):
            st.write(answer)


def render_property(view):
    prop = view.property
    address = st.text_input("Property Address", prop.address)
    lot_size = st.text_input("Lot Size (acres)", prop.lot_size)
    zoning = st.selectbox(
        "Zoning", _options(ZONING_OPTIONS),
        index=_options(ZONING_OPTIONS).index(prop.zoning) if prop.zoning in _options(ZONING_OPTIONS) else None,
        format_func=_label_for(ZONING_OPTIONS),
    )
    property_type = st.selectbox(
        "Property Type", _options(PROPERTY_TYPES),
        index=_options(PROPERTY_TYPES).index(prop.property_type) if prop.property_type in _options(PROPERTY_TYPES) else None,
        format_func=_label_for(PROPERTY_TYPES),
    )
    edits = {"address": address, "lot_size": lot_size, "zoning": zoning or "", "property_type": property_type or ""}
    for key, value in edits.items():
        if getattr(prop, key) != value:
            run(controller.edit_field, "property", key, value)


def render_pool(view):
    pool = view.pool
    pool_type = st.radio(
        "Pool Type", _options(POOL_TYPES),
        index=_options(POOL_TYPES).index(pool.pool_type) if pool.pool_type in _options(POOL_TYPES) else None,
        format_func=_label_for(POOL_TYPES), horizontal=True,
    )
    col1, col2, col3 = st.columns(3)
    length = col1.text_input("Length (ft)", pool.length)
    width = col2.text_input("Width (ft)", pool.width)
    depth = col3.text_input("Depth (ft)", pool.depth)

    heating = st.checkbox("Heating", pool.heating)
    heating_type = pool.heating_type
    if heating:
        heating_type = st.selectbox(
            "Heating Type", _options(HEATING_TYPES),
            index=_options(HEATING_TYPES).index(pool.heating_type) if pool.heating_type in _options(HEATING_TYPES) else None,
            format_func=_label_for(HEATING_TYPES),
        )
    lighting = st.checkbox("Lighting", pool.lighting)
    diving_board = st.checkbox("Diving Board", pool.diving_board)
    fence = st.checkbox("Safety Fence", pool.fence)

    edits = {
        "pool_type": pool_type or "", "length": length, "width": width, "depth": depth,
        "heating": heating, "heating_type": heating_type, "lighting": lighting,
        "diving_board": diving_board, "fence": fence,
    }
    for key, value in edits.items():
        if getattr(pool, key) != value:
            run(controller.edit_field, "pool", key, value)


def render_documents(view):
    st.caption("Upload required documentation (PDF or image files, max 10MB each)")
    staged = {doc.category: doc for doc in view.documents}
    for category in DOCUMENT_CATEGORIES:
        st.markdown(f"**{category}**")
        doc = staged.get(category)
        if doc:
            col1, col2 = st.columns([4, 1])
            col1.success(f"✅ {doc.name} — uploaded successfully")
            if col2.button("🗑️", key=f"remove-{doc.id}"):
                run(controller.remove_document, doc.id)
                st.rerun()
            if doc.preview:
                with st.expander("Preview"):
                    st.image(doc.preview)
        else:
            files = st.file_uploader(
                f"Drag and drop your {category.lower()} here",
                type=["pdf", "png", "jpg", "jpeg"],
                accept_multiple_files=True,
                key=f"upload-{category}",
            )
            if files:
                run(controller.upload_documents, category, files)
                st.rerun()

    hint = documents_hint(len(view.documents), len(DOCUMENT_CATEGORIES))
    if hint:
        st.warning(f"**Missing Documents** — {hint}")


def _section_header(title, step):
    label, edit = st.columns([4, 1])
    label.markdown(f"**{title}**")
    if edit.button("Edit", key=f"edit-{step}"):
        run(controller.edit_step, step)
        st.rerun()


def render_review(view):
    prop, pool = view.property, view.pool
    with st.container(border=True):
        _section_header("Property", "property")
        st.write(f"{prop.address} · {prop.lot_size} acres · {prop.zoning} · {prop.property_type}")
    with st.container(border=True):
        _section_header("Pool", "pool")
        heating = f"Yes ({pool.heating_type})" if pool.heating else "No"
        st.write(f"{pool.pool_type} · {pool.length}ft x {pool.width}ft · {pool.depth}ft deep")
        st.write(
            f"Heating: {heating} · Lighting: {'Yes' if pool.lighting else 'No'} · "
            f"Diving Board: {'Yes' if pool.diving_board else 'No'} · Fence: {'Yes' if pool.fence else 'No'}"
        )
    with st.container(border=True):
        _section_header("Documents", "documents")
        for doc in view.documents:
            st.write(f"📄 {doc.category}: {doc.name}")

    if view.notice:
        st.error(f"Error generating application. Please try again. ({view.notice['message']})")
        if st.button("Dismiss"):
            run(controller.dismiss_notice)
            st.rerun()


def render_form(view):
    step = view.step
    st.progress(view.progress / len(FORM_STEPS), text=f"Step {view.progress} of {len(FORM_STEPS)}")
    st.header(STEP_TITLES[step])
    st.caption(SCREEN_MESSAGES[step])

    {"property": render_property, "pool": render_pool,
     "documents": render_documents, "review": render_review}[step](view)

    view = controller.view()
    back, forward = st.columns(2)
    if back.button("← Previous", disabled=step == "property", use_container_width=True):
        run(controller.go_previous)
        st.rerun()
    if step == "review":
        if forward.button("Submit Application", type="primary", use_container_width=True,
                          disabled=view.is_submitting):
            with st.spinner("Validating your application..."):
                run(controller.submit)
            st.rerun()
    elif forward.button("Next →", type="primary", disabled=not view.can_advance, use_container_width=True):
        run(controller.go_next)
        st.rerun()


def render_results(view):
    results = view.results
    if results is None:
        return
    banner = results.banner
    (st.success if banner.tone == "positive" else st.warning)(f"**{banner.title}** — {banner.message}")

    st.subheader("Validation Checklist")
    for row in results.checklist:
        st.markdown(f"{'✅' if row.passed else '❌'} **{row.item}**")
        if row.details:
            st.caption(row.details)

    if results.missing_items:
        st.error("**Missing Items**\n\n" + "\n".join(f"- {item}" for item in results.missing_items))
    if results.compliance_notes:
        st.info("**Compliance Notes**\n\n" + "\n".join(f"- {note}" for note in results.compliance_notes))

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Property Summary**")
        for row in results.property_summary:
            st.caption(f"{row.label}: {row.value}")
    with col2:
        st.markdown("**Pool Summary**")
        for row in results.pool_summary:
            st.caption(f"{row.label}: {row.value}")

    edit, download, new = st.columns(3)
    if edit.button("✏️ Edit Application", use_container_width=True):
        run(controller.edit_application)
        st.rerun()
    if results.download_available:
        download.download_button(
            "⬇️ Download Application",
            data=render_application_text(view.validation_result),
            file_name=DOWNLOAD_FILENAME,
            mime="text/plain",
            use_container_width=True,
        )
    if new.button("Start New Application", use_container_width=True):
        run(controller.start_new_application)
        clear_flow_trace(controller.thread_id)
        st.rerun()


# ── Main ────────────────────────────────────────────────────────────────
current = controller.view()
if current.screen == "landing":
    render_landing()
elif current.screen == "form":
    render_form(current)
else:
    render_results(current)
