"""CLI dashboard — prints the current analysis to the console."""


def _fmt(value, suffix: str = "") -> str:
    return f"{value:,.2f}{suffix}" if isinstance(value, (int, float)) else "N/A"


def print_analysis(response: dict) -> str:
    """Format and print an analysis response.

    Args:
        response: Dict produced by ``FutureAnalysisEngine.build()``.

    Returns:
        The formatted string (also printed to stdout).
    """
    data = response.get("data", {})
    signal = data.get("signal", {})
    levels = data.get("levels", {})
    technical = data.get("technical", {})
    cert = data.get("movementCertificate", {})
    zigzag = data.get("zigzag") or {}
    reasons = signal.get("reasoning") or []

    lines = [
        "──────────────── Cocoa Signal ────────────────",
        f"  Symbol:          {data.get('symbol', 'N/A')}",
        f"  Price:           {_fmt(data.get('currentPrice'))}",
        f"  24h change:      {_fmt(data.get('priceChange'), '%')}",
        f"  Signal:          {signal.get('type', 'N/A')} ({signal.get('strength', 0)}%)",
        f"  Stop / Target:   {_fmt(signal.get('stopLoss'))} / {_fmt(signal.get('takeProfit'))}",
        f"  Risk/Reward:     {_fmt(signal.get('riskReward'))}",
        f"  RSI / CMO:       {_fmt(technical.get('rsi'))} / {_fmt(technical.get('cmo'))}",
        f"  Support:         {_fmt(levels.get('support'))}",
        f"  Resistance:      {_fmt(levels.get('resistance'))}",
        f"  ZigZag trend:    {zigzag.get('trend', 'N/A')}",
        f"  Certificate:     {cert.get('status', 'N/A')} "
        f"({cert.get('direction', 'N/A')}, score {cert.get('score', 0)})",
    ]
    lines.extend(f"    - {reason}" for reason in reasons)
    lines.append("──────────────────────────────────────────────")

    output = "\n".join(lines)
    print(output)
    return output
