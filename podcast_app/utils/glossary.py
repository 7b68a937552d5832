# Centralized tooltip/help text used across the app.

KPI_TOOLTIPS = {
    "Completion": "Average share of an episode that listeners played through (0–100%).",
    "Duration": "Episode runtime in minutes.",
    "New share": "New listeners / total listeners for the episode.",
    "Subscribers": "Cumulative subscribers at the time the episode was released.",
    "Shares": "Social media shares attributed to the episode.",
    "R²": "Share of variation explained by the fitted straight-line trend (0 = none, 1 = perfect).",
}

CHART_HELP = {
    "duration_completion": "Drag with the pan buttons, zoom around the anchor, or reset to the full season.",
    "listener_mix": "Bands stack returning listeners under new listeners; together they always reach 100%.",
    "subscriber_growth": "Steeper stretches mark episodes or campaigns that accelerated growth.",
    "shares_subscribers": "The dashed line is the least-squares trend of subscribers gained per share.",
}
