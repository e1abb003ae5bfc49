"""Default rows inserted when the schema is created."""

DEFAULT_SETTINGS = [
    ("vml_parser", "builtin", "Document parser"),
    ("vml_dir", "", "VML files directory"),
    ("theme", "light", "UI theme (light/dark)"),
    ("grid_snap", "true", "Snap to grid when dragging"),
    ("grid_size", "10", "Grid size in pixels"),
    ("api_server_enabled", "false", "Enable HTTP API server"),
    ("api_server_port", "8889", "API server port"),
    ("selected_control", "", "Currently selected control name"),
]

# (control_type, event_name, target_event, display_order)
DEFAULT_CONTROL_EVENTS = [
    ("Button", "OnClick", "Click", 1),
    ("Button", "OnPointerPressed", "PointerPressed", 2),
    ("Button", "OnPointerReleased", "PointerReleased", 3),
    ("TextBox", "OnTextChanged", "TextChanged", 1),
    ("TextBox", "OnGotFocus", "GotFocus", 2),
    ("TextBox", "OnLostFocus", "LostFocus", 3),
    ("TextBox", "OnKeyDown", "KeyDown", 4),
    ("CheckBox", "OnChecked", "Checked", 1),
    ("CheckBox", "OnUnchecked", "Unchecked", 2),
    ("RadioButton", "OnChecked", "Checked", 1),
    ("ToggleSwitch", "OnChecked", "Checked", 1),
    ("ToggleSwitch", "OnUnchecked", "Unchecked", 2),
    ("ComboBox", "OnSelectionChanged", "SelectionChanged", 1),
    ("ListBox", "OnSelectionChanged", "SelectionChanged", 1),
    ("ListBox", "OnDoubleTapped", "DoubleTapped", 2),
    ("Slider", "OnValueChanged", "ValueChanged", 1),
    ("Window", "OnOpened", "Opened", 1),
    ("Window", "OnClosing", "Closing", 2),
    ("Window", "OnClosed", "Closed", 3),
]

# (name, python_type, category, icon, width, height, default_props, is_container)
DEFAULT_CONTROL_TYPES = [
    ("Button", "vml_designer.controls.library.Button", "Common", "button", 100, 30, "Content=Button", False),
    ("TextBox", "vml_designer.controls.library.TextBox", "Input", "textbox", 150, 30, None, False),
    ("TextBlock", "vml_designer.controls.library.TextBlock", "Common", "text", 100, 20, "Text=TextBlock", False),
    ("Label", "vml_designer.controls.library.Label", "Common", "label", 100, 20, "Content=Label", False),
    ("CheckBox", "vml_designer.controls.library.CheckBox", "Input", "checkbox", 100, 20, "Content=CheckBox", False),
    ("ComboBox", "vml_designer.controls.library.ComboBox", "Input", "combo", 120, 30, None, False),
    ("ListBox", "vml_designer.controls.library.ListBox", "Input", "list", 150, 100, None, False),
    ("StackPanel", "vml_designer.controls.library.StackPanel", "Layout", "stack", 200, 200, None, True),
    ("Grid", "vml_designer.controls.library.Grid", "Layout", "grid", 200, 200, None, True),
    ("Border", "vml_designer.controls.library.Border", "Layout", "border", 150, 100, None, True),
    ("Canvas", "vml_designer.controls.library.Canvas", "Layout", "canvas", 300, 200, None, True),
    ("ScrollViewer", "vml_designer.controls.library.ScrollViewer", "Layout", "scroll", 200, 150, None, True),
    ("DockPanel", "vml_designer.controls.library.DockPanel", "Layout", "dock", 200, 200, None, True),
    ("Slider", "vml_designer.controls.library.Slider", "Input", "slider", 150, 20, None, False),
    ("ProgressBar", "vml_designer.controls.library.ProgressBar", "Display", "progress", 150, 20, None, False),
    ("Image", "vml_designer.controls.library.Image", "Display", "image", 100, 100, None, False),
    ("Rectangle", "vml_designer.controls.library.Rectangle", "Display", "rect", 100, 100, None, False),
    ("RadioButton", "vml_designer.controls.library.RadioButton", "Input", "radio", 100, 20, "Content=Option", False),
    ("ToggleSwitch", "vml_designer.controls.library.ToggleSwitch", "Input", "toggle", 60, 30, None, False),
    ("Window", "vml_designer.controls.library.Window", "Layout", "window", 600, 400, None, True),
]
