from jinja2 import Environment, PackageLoader, select_autoescape

# Initialize Jinja2 environment using PackageLoader
# This automatically finds the 'templates' folder within the 'devon_farm' package
jinja_env = Environment(
    loader=PackageLoader("devon_farm", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
)
