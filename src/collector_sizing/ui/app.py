"""
Collector Sizing Calculator - Streamlit UI
==========================================

Browser front-end for the sizing engine.

Pages:
1. Sites (inventory, logs, per-site collector results)
2. Summary (all sites, CSV download)
3. System Configuration (max load, failover, protocol weights,
   device defaults, collector capacities)
4. Import / Export

Run with:
    streamlit run src/collector_sizing/ui/app.py
"""

from typing import List, Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from collector_sizing.deployment import dumps_deployment, export_filename, loads_deployment
from collector_sizing.errors import ConfigurationError, DeploymentImportError
from collector_sizing.models import CollectorGroup, DeviceCategory, Site, SizingConfig, is_virtualization_host
from collector_sizing.report import sites_frame, totals_frame
from collector_sizing.settings import Settings, get_default_config, setup_logging
from collector_sizing.sizer import size_deployment, size_site
from collector_sizing import state

st.set_page_config(
    page_title="Collector Sizing Calculator",
    page_icon="📡",
    layout="wide",
    initial_sidebar_state="expanded",
)


def _init_session() -> None:
    if "config" in st.session_state:
        return
    settings = Settings()
    setup_logging(settings.log_level, settings.log_format)
    config = get_default_config(settings)
    st.session_state["config"] = config
    st.session_state["sites"] = [state.new_site(config)]
    st.session_state["import_warnings"] = []


def get_config() -> SizingConfig:
    return st.session_state["config"]


def get_sites() -> List[Site]:
    return st.session_state["sites"]


def commit(config: Optional[SizingConfig] = None, sites: Optional[List[Site]] = None) -> None:
    """Replace the session snapshots. Streamlit reruns the script on the next interaction."""
    if config is not None:
        st.session_state["config"] = config
    if sites is not None:
        st.session_state["sites"] = list(sites)


def apply(fn, *args, **kwargs):
    """Run a reducer, surfacing ConfigurationError as a UI error instead of a traceback."""
    try:
        return fn(*args, **kwargs)
    except ConfigurationError as e:
        st.error(str(e))
        return None


SITE_WIDGET_PREFIXES = ("site-name-", "count-", "additional-", "netflow-", "syslog-", "traps-")


def _forget_widgets() -> None:
    # Keyed widgets keep their own value across reruns; drop them so they pick up the new snapshot.
    for key in [k for k in st.session_state.keys() if str(k).startswith(SITE_WIDGET_PREFIXES)]:
        del st.session_state[key]


def _load_color(load: int) -> str:
    if load >= 80:
        return "#dc3545"
    if load >= 60:
        return "#ffc107"
    return "#28a745"


def render_collectors(title: str, group: CollectorGroup, total_label: str) -> None:
    st.markdown(f"**{title}**")
    if not group.collectors:
        st.info("No collectors required")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Size", group.size)
    col2.metric("Primary", len(group.primaries))
    col3.metric("Average Load", f"{group.average_load}%")
    st.caption(total_label)

    labels = [f"#{i + 1} {c.type}" for i, c in enumerate(group.collectors)]
    loads = [c.load for c in group.collectors]
    fig = go.Figure(
        go.Bar(
            x=loads,
            y=labels,
            orientation="h",
            marker_color=[_load_color(l) for l in loads],
            text=[f"{l}%" for l in loads],
            textposition="auto",
        )
    )
    fig.update_layout(
        xaxis=dict(range=[0, 100], title="Load (%)"),
        height=80 + 30 * len(loads),
        margin=dict(l=10, r=10, t=10, b=10),
    )
    st.plotly_chart(fig, use_container_width=True)


def page_sites() -> None:
    st.header("🏢 Sites")
    config = get_config()
    sites = get_sites()

    if st.button("➕ Add Site"):
        commit(sites=state.add_site(config, sites))
        st.rerun()

    if not sites:
        st.info("Get started by adding your first site to calculate collector requirements.")
        return

    for index, site in enumerate(sites):
        result = size_site(site, config)
        polling = result.allocation.polling
        logs = result.allocation.logs
        header = (
            f"{site.name} · x{len(polling.primaries)} Polling · "
            f"x{len(logs.primaries)} Netflow/Logs · {polling.average_load}% · {result.device_total} devices"
        )
        with st.expander(header, expanded=(index == 0)):
            name = st.text_input("Site name", value=site.name, key=f"site-name-{index}")
            if name != site.name:
                commit(sites=state.replace_site(sites, index, state.rename_site(site, name)))
                st.rerun()

            tab_devices, tab_logs, tab_results = st.tabs(["Devices", "Logs & NetFlow", "Results"])

            with tab_devices:
                edited = site
                for device_type, device in site.devices.items():
                    cols = st.columns([3, 2, 2])
                    cols[0].markdown(device_type)
                    count = cols[1].number_input(
                        "Count", min_value=0, step=1, value=int(device.count), key=f"count-{index}-{device_type}"
                    )
                    additional = device.additional_count
                    if is_virtualization_host(device_type, device):
                        additional = cols[2].number_input(
                            "vCenters",
                            min_value=0,
                            step=1,
                            value=int(device.additional_count or 1),
                            key=f"additional-{index}-{device_type}",
                        )
                        if additional == (device.additional_count or 1):
                            additional = device.additional_count
                    if count != device.count or additional != device.additional_count:
                        edited = state.set_device_count(edited, device_type, count, additional)
                if st.button("Reset devices", key=f"reset-devices-{index}"):
                    edited = state.reset_site_devices(site, config)
                    _forget_widgets()
                if edited is not site:
                    commit(sites=state.replace_site(sites, index, edited))
                    st.rerun()

            with tab_logs:
                cols = st.columns(3)
                netflow = cols[0].number_input("NetFlow EPS", min_value=0.0, value=float(site.logs.netflow), key=f"netflow-{index}")
                syslog = cols[1].number_input("Syslog EPS", min_value=0.0, value=float(site.logs.syslog), key=f"syslog-{index}")
                traps = cols[2].number_input("Traps EPS", min_value=0.0, value=float(site.logs.traps), key=f"traps-{index}")
                edited = site
                if (netflow, syslog, traps) != (site.logs.netflow, site.logs.syslog, site.logs.traps):
                    edited = state.set_site_logs(site, netflow=netflow, syslog=syslog, traps=traps)
                if st.button("Reset logs", key=f"reset-logs-{index}"):
                    edited = state.reset_site_logs(site)
                    _forget_widgets()
                if edited is not site:
                    commit(sites=state.replace_site(sites, index, edited))
                    st.rerun()

            with tab_results:
                col1, col2 = st.columns(2)
                with col1:
                    render_collectors("Polling", polling, f"Total polling load: {result.total_weight:,.1f}")
                with col2:
                    render_collectors("Logs & NetFlow", logs, f"Total EPS: {result.total_eps:,.0f}")

            if st.button("🗑️ Remove site", key=f"remove-site-{index}"):
                commit(sites=state.remove_site(sites, index))
                _forget_widgets()
                st.rerun()


def page_summary() -> None:
    st.header("📊 Summary")
    config = get_config()
    sizing = size_deployment(get_sites(), config)

    df = sites_frame(sizing)
    st.dataframe(df, hide_index=True, use_container_width=True)

    st.subheader("Collectors Required")
    st.dataframe(totals_frame(sizing), hide_index=True, use_container_width=True)

    st.download_button(
        "⬇️ Download CSV",
        data=df.to_csv(index=False),
        file_name="collector-sizing.csv",
        mime="text/csv",
    )


def _general_settings(config: SizingConfig) -> None:
    st.subheader("General Settings")
    name = st.text_input("Deployment name", value=config.deployment_name)
    max_load = st.slider("Maximum load per collector (%)", 1.0, 100.0, value=float(config.max_load), step=1.0)
    polling = st.toggle("Polling N+1 redundancy", value=config.enable_polling_failover)
    logs = st.toggle("Logs N+1 redundancy", value=config.enable_logs_failover)
    advanced = st.toggle("Show advanced settings", value=config.show_advanced_settings)

    new = config
    if name != config.deployment_name:
        new = state.rename_deployment(new, name)
    if max_load != config.max_load:
        new = apply(state.set_max_load, new, max_load) or new
    if polling != config.enable_polling_failover or logs != config.enable_logs_failover:
        new = state.set_failover(new, polling=polling, logs=logs)
    if advanced != config.show_advanced_settings:
        new = state.toggle_advanced_settings(new)
    if new is not config:
        commit(config=new)
        st.rerun()


def _protocol_weights(config: SizingConfig) -> None:
    st.subheader("Protocol Weights")
    st.caption("Higher weights indicate protocols that require more collector resources.")
    for method, weight in config.method_weights.items():
        cols = st.columns([3, 2, 1])
        cols[0].markdown(method)
        value = cols[1].number_input("Weight", min_value=0.0, value=float(weight), key=f"weight-{method}")
        if value != weight:
            commit(config=state.set_protocol_weight(config, method, value))
            st.rerun()
        if cols[2].button("🗑️", key=f"remove-weight-{method}"):
            result = apply(state.remove_protocol, config, get_sites(), method)
            if result:
                commit(*result)
                st.rerun()

    cols = st.columns([3, 2, 1])
    new_name = cols[0].text_input("New protocol")
    new_weight = cols[1].number_input("Weight", min_value=0.0, value=3.0, key="new-weight")
    if cols[2].button("Add", key="add-protocol"):
        result = apply(state.add_protocol, config, new_name, new_weight)
        if result:
            commit(config=result)
            st.rerun()


def _device_defaults(config: SizingConfig) -> None:
    st.subheader("Device Defaults")
    sites = get_sites()
    device_type = st.selectbox("Device type", list(config.device_defaults))
    if device_type is None:
        return
    device = config.device_defaults[device_type]

    instances = st.number_input("Instances per device", min_value=0.0, value=float(device.instances))
    if instances != device.instances:
        commit(*state.update_device_default(config, sites, device_type, instances=instances))
        st.rerun()

    for method, ratio in device.methods.items():
        cols = st.columns([3, 2, 1])
        cols[0].markdown(method)
        value = cols[1].number_input(
            "Ratio", min_value=0.0, max_value=1.0, step=0.05, value=float(ratio), key=f"ratio-{device_type}-{method}"
        )
        if value != ratio:
            commit(*state.set_method_ratio(config, sites, device_type, method, value))
            st.rerun()
        if cols[2].button("🗑️", key=f"remove-method-{device_type}-{method}"):
            commit(*state.remove_collection_method(config, sites, device_type, method))
            st.rerun()

    warning = state.ratio_warning(device.methods)
    if warning:
        st.warning(warning)

    cols = st.columns([3, 1])
    method = cols[0].selectbox("Add protocol", [m for m in config.method_weights if m not in device.methods])
    if cols[1].button("Add", key="add-method"):
        result = apply(state.add_collection_method, config, sites, device_type, method or "")
        if result:
            commit(*result)
            st.rerun()

    st.divider()
    cols = st.columns([3, 2, 1, 1])
    new_type = cols[0].text_input("New device type")
    per_host = cols[1].checkbox("Sized per vCenter", key="new-type-per-host")
    if cols[2].button("Add", key="add-device-type"):
        category = DeviceCategory.VIRTUALIZATION_HOST if per_host else None
        result = apply(state.add_device_type, config, sites, new_type, category)
        if result:
            commit(*result)
            st.rerun()
    if cols[3].button("Remove selected", key="remove-device-type"):
        result = apply(state.remove_device_type, config, device_type)
        if result:
            commit(config=result)
            st.rerun()


def _collector_capacities(config: SizingConfig) -> None:
    st.subheader("Collector Capacities")
    df = pd.DataFrame(
        [{"size": s, "weight": c.weight, "eps": c.eps} for s, c in config.collector_capacities.items()]
    )
    edited = st.data_editor(df, hide_index=True, disabled=["size"], use_container_width=True)
    new = config
    for row in edited.itertuples(index=False):
        current = config.collector_capacities[row.size]
        if (row.weight, row.eps) != (current.weight, current.eps):
            new = state.set_collector_capacity(new, row.size, weight=float(row.weight), eps=float(row.eps))
    if new is not config:
        commit(config=new)
        st.rerun()


def page_system_configuration() -> None:
    st.header("⚙️ System Configuration")
    config = get_config()
    _general_settings(config)
    if config.show_advanced_settings:
        st.divider()
        _protocol_weights(config)
        st.divider()
        _device_defaults(config)
        st.divider()
        _collector_capacities(config)


def page_import_export() -> None:
    st.header("💾 Import / Export")
    config = get_config()

    st.download_button(
        "⬇️ Export Deployment",
        data=dumps_deployment(get_sites(), config),
        file_name=export_filename(),
        mime="application/json",
    )

    uploaded = st.file_uploader("Import Deployment", type=["json"])
    if uploaded is not None and st.button("Import", type="primary"):
        try:
            result = loads_deployment(uploaded.read().decode("utf-8"), config)
        except DeploymentImportError as e:
            st.error("Failed to import configuration. Please check the file format.")
            for p in e.problems:
                st.markdown(f"- {p}")
        else:
            commit(config=result.config, sites=result.sites)
            _forget_widgets()
            st.session_state["import_warnings"] = result.warnings
            st.success(f"Imported {len(result.sites)} site(s)")

    warnings = st.session_state.get("import_warnings") or []
    if warnings:
        st.warning("Import Warnings\n\n" + "\n".join(f"- {w}" for w in warnings))
        if st.button("Dismiss"):
            st.session_state["import_warnings"] = []
            st.rerun()


def main():
    """Main application."""
    _init_session()
    config = get_config()

    st.title("📡 Collector Sizing Calculator")
    st.caption(config.deployment_name)

    with st.sidebar:
        st.header("Navigation")
        page = st.radio(
            "Select Page",
            ["🏢 Sites", "📊 Summary", "⚙️ System Configuration", "💾 Import / Export"],
        )

    if "Sites" in page:
        page_sites()
    elif "Summary" in page:
        page_summary()
    elif "System Configuration" in page:
        page_system_configuration()
    elif "Import" in page:
        page_import_export()


if __name__ == "__main__":
    main()
