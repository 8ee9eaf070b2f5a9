"""Unit tests for the Android project templates."""

from webdroid.models.project import PermissionProfile, ProjectConfig
from webdroid.services.templates import (
    render_build_gradle,
    render_github_workflow,
    render_layout,
    render_main_activity,
    render_manifest,
)


def _uses_permission_lines(manifest):
    return [line.strip() for line in manifest.splitlines() if "<uses-permission" in line]


class TestManifest:
    """Tests for AndroidManifest.xml rendering."""

    def test_location_profile(self, demo_config, location_permissions):
        """Test a location profile declares exactly INTERNET and fine location."""
        manifest = render_manifest(demo_config, location_permissions)
        assert _uses_permission_lines(manifest) == [
            '<uses-permission android:name="android.permission.INTERNET" />',
            '<uses-permission android:name="android.permission.ACCESS_FINE_LOCATION" />',
        ]
        assert 'package="com.demo.app"' in manifest
        assert 'android:label="DemoApp"' in manifest

    def test_custom_permission_follows_internet(self, demo_config):
        profile = PermissionProfile(
            uses_internet=True,
            uses_camera=False,
            custom_permissions=("BLUETOOTH",),
            reasoning="Web Bluetooth.",
        )
        assert _uses_permission_lines(render_manifest(demo_config, profile)) == [
            '<uses-permission android:name="android.permission.INTERNET" />',
            '<uses-permission android:name="android.permission.BLUETOOTH" />',
        ]

    def test_camera_declared_once_when_enabled(self, demo_config):
        profile = PermissionProfile(uses_internet=True, uses_camera=True, reasoning="getUserMedia.")
        manifest = render_manifest(demo_config, profile)
        assert manifest.count('android:name="android.permission.CAMERA"') == 1

    def test_camera_not_declared_when_disabled(self, demo_config, basic_permissions):
        manifest = render_manifest(demo_config, basic_permissions)
        assert "android.permission.CAMERA" not in manifest

    def test_custom_permissions_do_not_repeat_flags(self, demo_config):
        """Test custom entries already covered by a flag or INTERNET are declared once."""
        profile = PermissionProfile.model_validate({
            "usesInternet": True,
            "usesCamera": True,
            "customPermissions": ["CAMERA", "INTERNET", "VIBRATE", "android.permission.VIBRATE"],
            "reasoning": "Camera app.",
        })
        assert _uses_permission_lines(render_manifest(demo_config, profile)) == [
            '<uses-permission android:name="android.permission.INTERNET" />',
            '<uses-permission android:name="android.permission.CAMERA" />',
            '<uses-permission android:name="android.permission.VIBRATE" />',
        ]

    def test_launcher_activity_and_icons(self, demo_config, basic_permissions):
        manifest = render_manifest(demo_config, basic_permissions)
        assert 'android:name=".MainActivity"' in manifest
        assert "android.intent.action.MAIN" in manifest
        assert "android.intent.category.LAUNCHER" in manifest
        assert 'android:icon="@mipmap/ic_launcher"' in manifest
        assert 'android:roundIcon="@mipmap/ic_launcher_round"' in manifest

    def test_is_deterministic(self, demo_config, location_permissions):
        assert render_manifest(demo_config, location_permissions) == render_manifest(
            demo_config, location_permissions
        )


class TestMainActivity:
    """Tests for MainActivity.java rendering."""

    def test_location_enables_geolocation(self, demo_config, location_permissions):
        source = render_main_activity(demo_config, location_permissions)
        assert source.startswith("package com.demo.app;")
        assert "setGeolocationEnabled(true)" in source
        assert "onGeolocationPermissionsShowPrompt" in source
        assert "import android.webkit.GeolocationPermissions;" in source

    def test_no_geolocation_without_location(self, demo_config, basic_permissions):
        source = render_main_activity(demo_config, basic_permissions)
        assert "setGeolocationEnabled" not in source
        assert "WebChromeClient" not in source

    def test_webview_settings(self, demo_config, basic_permissions):
        source = render_main_activity(demo_config, basic_permissions)
        assert "setJavaScriptEnabled(true)" in source
        assert "setDomStorageEnabled(true)" in source
        assert 'loadUrl("file:///android_asset/index.html")' in source

    def test_back_navigation(self, demo_config, basic_permissions):
        source = render_main_activity(demo_config, basic_permissions)
        assert "myWebView.canGoBack()" in source
        assert "myWebView.goBack()" in source
        assert "super.onBackPressed()" in source


class TestBuildFiles:
    """Tests for layout, Gradle and workflow rendering."""

    def test_layout_has_webview(self):
        layout = render_layout()
        assert 'android:id="@+id/webview"' in layout
        assert "ConstraintLayout" in layout

    def test_build_gradle(self, demo_config):
        gradle = render_build_gradle(demo_config)
        assert 'applicationId "com.demo.app"' in gradle
        assert 'versionName "1.0.0"' in gradle
        assert "compileSdk 33" in gradle
        assert "minSdk 24" in gradle
        assert "targetSdk 33" in gradle
        assert "androidx.appcompat:appcompat:1.6.1" in gradle
        assert "androidx.constraintlayout:constraintlayout:2.1.4" in gradle

    def test_workflow_artifact_named_after_folder(self):
        workflow = render_github_workflow(ProjectConfig(app_name="Demo App"))
        assert "name: Build Android APK" in workflow
        assert "name: Demo_App-debug-apk" in workflow
        assert "app/build/outputs/apk/debug/app-debug.apk" in workflow
        assert "java-version: '17'" in workflow
