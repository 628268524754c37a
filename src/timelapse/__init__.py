"""Command-line pipeline: analyze a repository, then render its timelapse frames."""
