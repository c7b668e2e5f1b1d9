"""Console output formatting utilities."""

from __future__ import annotations

from typing import Optional

from salon_metrics.metrics import ClientMetrics, FinanceMetrics, InsightsMetrics, OperationMetrics
from salon_metrics.reports import DashboardSummary


def format_brl(value: Optional[float]) -> str:
    """Format an amount as Brazilian reais.

    Examples:
        >>> format_brl(1234.56)
        'R$ 1.234,56'
        >>> format_brl(None)
        '-'
    """
    if value is None:
        return "-"
    sign = "-" if value < 0 else ""
    text = f"{abs(value):,.2f}"
    # 1,234.56 -> 1.234,56
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"


def format_pct(value: Optional[float]) -> str:
    """Format a percentage with one decimal, or '-' when undefined.

    Examples:
        >>> format_pct(12.345)
        '12.3%'
    """
    if value is None:
        return "-"
    return f"{value:.1f}%"


def format_finance_for_console(metrics: FinanceMetrics) -> str:
    """Build a human-readable summary of the financial facet.

    Args:
        metrics: FinanceMetrics for one window.

    Returns:
        Text for console output.
    """
    lines = []
    lines.append("Financeiro")
    lines.append("=" * 60)
    lines.append(f"Faturamento:            {format_brl(metrics.total)}")
    lines.append(f"Periodo anterior:       {format_brl(metrics.prior_total)}")
    lines.append(f"Crescimento:            {format_pct(metrics.growth_pct)}")
    lines.append(f"Clientes atendidos:     {metrics.unique_client_count}")
    lines.append(f"Servicos realizados:    {metrics.sales_count}")
    lines.append(f"Ticket medio/cliente:   {format_brl(metrics.ticket_per_client)}")
    lines.append(f"Ticket medio/servico:   {format_brl(metrics.ticket_per_service)}")

    if metrics.goal_target is not None:
        lines.append("")
        lines.append("Meta do mes:")
        lines.append(f"  Meta:      {format_brl(metrics.goal_target)}")
        lines.append(f"  Atual:     {format_brl(metrics.goal_current)}")
        lines.append(f"  Progresso: {format_pct(metrics.goal_progress_pct)}")
        lines.append(f"  Falta:     {format_brl(metrics.remaining_to_goal)}")
    if metrics.projection is not None:
        lines.append(f"Projecao do mes:        {format_brl(metrics.projection)}")

    if metrics.per_service_breakdown:
        lines.append("")
        lines.append("Faturamento por servico:")
        for s in metrics.per_service_breakdown:
            lines.append(f"  {s.service_name}: {s.qty}x  {format_brl(s.total)}")

    return "\n".join(lines)


def format_clients_for_console(metrics: ClientMetrics) -> str:
    """Build a human-readable summary of the client facet."""
    lines = []
    lines.append("Clientes")
    lines.append("=" * 60)
    lines.append(f"Ativos:                 {metrics.active_count}")
    lines.append(f"Inativos:               {metrics.inactive_count}")
    lines.append(f"Novos no periodo:       {metrics.new_clients_count}")
    lines.append(f"Atendidos no periodo:   {metrics.unique_clients_count}")
    lines.append(f"Recorrentes:            {metrics.recurring_clients_count}")
    lines.append(f"Taxa de retencao:       {format_pct(metrics.retention_rate)}")
    lines.append(f"Ticket medio/cliente:   {format_brl(metrics.ticket_per_client)}")

    if metrics.top_clients:
        lines.append("")
        lines.append("Top clientes:")
        for i, c in enumerate(metrics.top_clients, start=1):
            lines.append(f"  {i}. {c.name}: {format_brl(c.total)}")

    if metrics.birthdays:
        lines.append("")
        lines.append("Aniversariantes do mes:")
        for c in metrics.birthdays:
            lines.append(f"  {c.name}")

    return "\n".join(lines)


def format_operations_for_console(metrics: OperationMetrics) -> str:
    """Build a human-readable summary of the operational facet."""
    lines = []
    lines.append("Operacional")
    lines.append("=" * 60)
    if metrics.most_sold is not None:
        lines.append(f"Mais vendido:           {metrics.most_sold.name} ({metrics.most_sold.qty}x)")
    if metrics.least_sold is not None:
        lines.append(f"Menos vendido:          {metrics.least_sold.name} ({metrics.least_sold.qty}x)")
    lines.append(f"Cancelamentos:          {metrics.canceled}")
    lines.append(f"Faltas:                 {metrics.no_shows}")
    lines.append(f"Dias entre visitas:     {metrics.avg_days_between_visits:.1f}")

    if metrics.busy_hours:
        lines.append("")
        lines.append("Horarios de pico:")
        for h in metrics.busy_hours:
            lines.append(f"  {h.hour:02d}:00  {h.count} atendimento(s)")

    return "\n".join(lines)


def format_insights_for_console(metrics: InsightsMetrics) -> str:
    """Build a human-readable summary of the insights facet."""
    lines = []
    lines.append("Insights")
    lines.append("=" * 60)
    lines.append(f"Ticket medio/servico:   {format_brl(metrics.avg_ticket_per_service)}")
    lines.append(f"Ticket medio/cliente:   {format_brl(metrics.ticket_per_client)}")
    if metrics.remaining_to_goal is not None:
        lines.append(f"Falta para a meta:      {format_brl(metrics.remaining_to_goal)}")
    if metrics.services_needed_for_goal is not None:
        lines.append(f"Servicos necessarios:   {metrics.services_needed_for_goal}")
    if metrics.top_contributing_service is not None:
        top = metrics.top_contributing_service
        lines.append(f"Servico destaque:       {top.name} ({format_brl(top.total)})")
    lines.append(f"Clientes inativos:      {metrics.inactive_client_count}")
    lines.append(f"Valor potencial perdido: {format_brl(metrics.potential_lost_value)}")
    return "\n".join(lines)


def format_dashboard_for_console(summary: DashboardSummary) -> str:
    lines = []
    lines.append("Painel")
    lines.append("=" * 60)
    lines.append(f"Faturamento do mes:     {format_brl(summary.monthly_revenue)}")
    lines.append(f"Clientes:               {summary.total_clients}")
    lines.append(f"Clientes inativos:      {summary.inactive_clients}")
    lines.append(f"Agendamentos hoje:      {summary.today_appointments}")
    lines.append(
        f"Meta:                   {format_pct(summary.goal_progress_pct)} "
        f"({format_brl(summary.goal_current)} de {format_brl(summary.goal_target)})"
    )
    return "\n".join(lines)


FORMATTERS = {
    "finance": format_finance_for_console,
    "clients": format_clients_for_console,
    "operations": format_operations_for_console,
    "insights": format_insights_for_console,
}
