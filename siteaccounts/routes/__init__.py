"""Flask blueprints of the site accounts panel."""
